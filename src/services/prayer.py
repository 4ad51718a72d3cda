"""Daily prayer times from the Aladhan API."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from src.config import Settings
from src.schemas.schemas import CALCULATION_METHODS, PRAYER_NAMES
from src.services.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

# Aladhan "school" parameter
ASR_SCHOOLS = {"Standard": 0, "Hanafi": 1}


@dataclass
class DailyTimings:
    """Prayer times for one day at one place."""

    day: date
    timings: dict[str, str]  # prayer -> "HH:MM", local to the location
    timezone: Optional[tzinfo] = None

    def as_datetimes(self) -> dict[str, datetime]:
        return parse_timings(self.day, self.timings, self.timezone)


def apply_adjustments(timings: Mapping[str, str], adjustments: Optional[Mapping[str, int]]) -> dict[str, str]:
    """Shift each prayer by its configured number of minutes, wrapping around midnight."""
    adjusted = dict(timings)
    for prayer, minutes in (adjustments or {}).items():
        if prayer not in adjusted or not minutes:
            continue
        hours, mins = map(int, adjusted[prayer].split(":"))
        total = (hours * 60 + mins + minutes) % (24 * 60)
        adjusted[prayer] = f"{total // 60:02d}:{total % 60:02d}"
    return adjusted


def parse_timings(day: date, timings: Mapping[str, str], tz: Optional[tzinfo] = None) -> dict[str, datetime]:
    result = {}
    for prayer in PRAYER_NAMES:
        if prayer in timings:
            hours, mins = map(int, timings[prayer].split(":"))
            result[prayer] = datetime.combine(day, time(hours, mins), tzinfo=tz)
    return result


def current_and_next_prayer(times: Mapping[str, datetime], now: datetime) -> tuple[str, str, datetime]:
    """Return (current prayer, next prayer, next prayer time).

    Before Fajr the current prayer is the previous night's Isha; after Isha the
    next prayer is tomorrow's Fajr.
    """
    ordered = [p for p in PRAYER_NAMES if p in times]
    for i, prayer in enumerate(ordered):
        if now < times[prayer]:
            return ordered[i - 1], prayer, times[prayer]
    return ordered[-1], ordered[0], times[ordered[0]] + timedelta(days=1)


class PrayerTimesService:
    """Fetches timings and applies per-user settings."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.base_url = settings.prayer_api_url.rstrip("/")

    async def get_timings(
        self,
        latitude: float,
        longitude: float,
        day: date,
        calculation_method: str = "MWL",
        asr_method: str = "Standard",
        adjustments: Optional[Mapping[str, int]] = None,
    ) -> DailyTimings:
        url = f"{self.base_url}/timings/{day.strftime('%d-%m-%Y')}"
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "method": CALCULATION_METHODS.get(calculation_method, CALCULATION_METHODS["MWL"]),
            "school": ASR_SCHOOLS.get(asr_method, 0),
        }

        logger.info(f"Fetching prayer times from {url} with params {params}")
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            data = response.json()["data"]
            raw = data["timings"]
            # Aladhan may suffix a zone, e.g. "05:12 (BST)"
            timings = {p: raw[p.capitalize()][:5] for p in PRAYER_NAMES if p.capitalize() in raw}
        except httpx.HTTPError as e:
            logger.error(f"Prayer times request failed: {e}")
            raise UpstreamServiceError(f"Prayer times request failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected prayer times response: {e}")
            raise UpstreamServiceError("Prayer times API returned an unexpected response") from e

        return DailyTimings(
            day=day,
            timings=apply_adjustments(timings, adjustments),
            timezone=_zone(data.get("meta", {}).get("timezone")),
        )


def _zone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone from prayer API: {name}")
        return None
