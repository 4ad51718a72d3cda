"""Tests for Qibla, geocoding and prayer times."""

from datetime import date, datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from src.services.location import distance_to_kaaba_km, haversine_km, qibla_bearing
from src.services.prayer import apply_adjustments, current_and_next_prayer, parse_timings

ALADHAN = "https://api.aladhan.com/v1"
NOMINATIM = "https://nominatim.openstreetmap.org"

TIMINGS = {
    "Fajr": "05:01",
    "Sunrise": "06:15",
    "Dhuhr": "12:10",
    "Asr": "15:30 (IST)",
    "Maghrib": "18:05",
    "Isha": "19:20",
    "Midnight": "00:08",
}


def _aladhan(day: date, tz: str = "Asia/Kolkata") -> tuple[str, dict]:
    url = f"{ALADHAN}/timings/{day.strftime('%d-%m-%Y')}"
    return url, {"code": 200, "data": {"timings": TIMINGS, "meta": {"timezone": tz}}}


# ============== Geometry ==============


def test_haversine_known_distance():
    # London to Paris is roughly 344 km
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(344, abs=3)


def test_qibla_from_known_cities():
    assert qibla_bearing(40.7128, -74.0060) == pytest.approx(58.5, abs=0.5)  # New York
    assert qibla_bearing(17.3850, 78.4867) == pytest.approx(282.7, abs=0.5)  # Hyderabad
    assert 0 <= qibla_bearing(-33.8688, 151.2093) < 360


def test_distance_at_kaaba_is_zero():
    assert distance_to_kaaba_km(21.4225, 39.8262) == pytest.approx(0, abs=1e-6)


@pytest.mark.asyncio
async def test_qibla_route(client: AsyncClient):
    data = (await client.get("/api/qibla", params={"lat": 40.7128, "lon": -74.0060})).json()
    assert data["direction"] == pytest.approx(58.5, abs=0.5)
    assert data["distanceKm"] == pytest.approx(10300, rel=0.02)

    assert (await client.get("/api/qibla", params={"lat": 95, "lon": 0})).status_code == 400


@pytest.mark.asyncio
async def test_geocode(client: AsyncClient, upstream):
    upstream.add(f"{NOMINATIM}/search", [{"lat": "17.3850", "lon": "78.4867", "display_name": "Hyderabad, India"}])
    data = (await client.get("/api/location/geocode", params={"q": "Hyderabad"})).json()
    assert data == {"query": "Hyderabad", "latitude": 17.385, "longitude": 78.4867, "displayName": "Hyderabad, India"}
    assert upstream.requests[-1].headers["User-Agent"]


@pytest.mark.asyncio
async def test_geocode_not_found(client: AsyncClient, upstream):
    upstream.add(f"{NOMINATIM}/search", [])
    response = await client.get("/api/location/geocode", params={"q": "Atlantis"})
    assert response.status_code == 404
    assert response.json()["error"] == 'Location "Atlantis" not found'


# ============== Prayer times ==============


def test_apply_adjustments_wraps_midnight():
    adjusted = apply_adjustments({"fajr": "05:00", "isha": "23:55"}, {"fajr": -3, "isha": 10})
    assert adjusted == {"fajr": "04:57", "isha": "00:05"}


def test_current_and_next_prayer():
    day = date(2026, 10, 19)
    times = parse_timings(day, {"fajr": "05:01", "sunrise": "06:15", "dhuhr": "12:10",
                                "asr": "15:30", "maghrib": "18:05", "isha": "19:20"}, timezone.utc)

    def at(hh, mm):
        return datetime(2026, 10, 19, hh, mm, tzinfo=timezone.utc)

    assert current_and_next_prayer(times, at(13, 0))[:2] == ("dhuhr", "asr")
    assert current_and_next_prayer(times, at(4, 0))[:2] == ("isha", "fajr")

    current, upcoming, when = current_and_next_prayer(times, at(21, 0))
    assert (current, upcoming) == ("isha", "fajr")
    assert when == times["fajr"] + timedelta(days=1)


@pytest.mark.asyncio
async def test_prayer_times_by_coordinates(client: AsyncClient, upstream):
    day = date(2026, 10, 19)
    upstream.add(*_aladhan(day))

    response = await client.get("/api/prayer-times", params={"lat": 17.385, "lon": 78.4867, "date": "2026-10-19"})
    assert response.status_code == 200
    data = response.json()
    assert data["timings"]["asr"] == "15:30"
    assert "midnight" not in data["timings"]
    assert data["calculationMethod"] == "MWL"
    assert data["nextPrayer"] in data["timings"]

    params = upstream.requests[-1].url.params
    assert params["method"] == "3"
    assert params["school"] == "0"


@pytest.mark.asyncio
async def test_prayer_times_use_saved_settings(auth_client: AsyncClient, upstream):
    day = date(2026, 10, 19)
    upstream.add(*_aladhan(day))
    await auth_client.post(
        "/api/prayer-settings",
        json={"calculationMethod": "Karachi", "asrMethod": "Hanafi", "adjustments": {"fajr": 5}},
    )

    data = (
        await auth_client.get("/api/prayer-times", params={"lat": 17.385, "lon": 78.4867, "date": "2026-10-19"})
    ).json()
    assert data["timings"]["fajr"] == "05:06"
    assert data["asrMethod"] == "Hanafi"

    params = upstream.requests[-1].url.params
    assert params["method"] == "1"
    assert params["school"] == "1"


@pytest.mark.asyncio
async def test_prayer_times_by_city(client: AsyncClient, upstream):
    day = date(2026, 10, 19)
    upstream.add(f"{NOMINATIM}/search", [{"lat": "17.3850", "lon": "78.4867", "display_name": "Hyderabad"}])
    upstream.add(*_aladhan(day))

    response = await client.get("/api/prayer-times", params={"city": "Hyderabad", "date": "2026-10-19"})
    assert response.status_code == 200
    assert response.json()["latitude"] == 17.385


@pytest.mark.asyncio
async def test_prayer_times_needs_location(client: AsyncClient):
    assert (await client.get("/api/prayer-times")).status_code == 400
    response = await client.get("/api/prayer-times", params={"lat": 1, "lon": 1, "method": "Nowhere"})
    assert response.status_code == 400
