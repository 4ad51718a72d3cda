"""Hijri calendar conversion and the fixed list of Islamic events."""

from datetime import date
from typing import NamedTuple, Optional

from hijridate import Gregorian, Hijri

from src.schemas.schemas import HijriDateResponse, IslamicEvent

HIJRI_MONTHS = [
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Awwal",
    "Jumada al-Thani",
    "Rajab",
    "Sha'ban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qidah",
    "Dhu al-Hijjah",
]

# (name, description, type, hijri day, hijri month)
ISLAMIC_EVENTS = [
    ("Islamic New Year",
     "The beginning of the Hijri year, marking the Prophet's migration from Mecca to Medina.",
     "holiday", 1, 1),
    ("Day of Ashura",
     "Commemorates the day Moses was saved from the Pharaoh. Many Muslims fast on this day.",
     "observance", 10, 1),
    ("Mawlid al-Nabi", "Celebrates the birthday of the Prophet Muhammad.", "observance", 12, 3),
    ("Beginning of Ramadan",
     "The start of the holy month of Ramadan, when Muslims fast from dawn until sunset.",
     "holiday", 1, 9),
    ("Laylat al-Qadr",
     "The Night of Power, when the first verses of the Quran were revealed.",
     "observance", 27, 9),
    ("Eid al-Fitr", "Festival of Breaking the Fast, celebrated at the end of Ramadan.", "holiday", 1, 10),
    ("Day of Arafah",
     "Pilgrims gather on Mount Arafah during Hajj. Many Muslims fast on this day.",
     "observance", 9, 12),
    ("Eid al-Adha",
     "Festival of the Sacrifice, commemorating the willingness of Ibrahim to sacrifice his son.",
     "holiday", 10, 12),
]


class HijriDate(NamedTuple):
    year: int
    month: int
    day: int


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Hijri month must be between 1 and 12, got {month}")
    return HIJRI_MONTHS[month - 1]


def to_hijri(day: date) -> HijriDate:
    """Convert a Gregorian date (Umm al-Qura calendar).

    Raises ValueError outside the supported range (1924-2077 CE).
    """
    try:
        hijri = Gregorian(day.year, day.month, day.day).to_hijri()
    except OverflowError as e:
        raise ValueError(f"Date {day.isoformat()} is outside the supported Hijri range") from e
    return HijriDate(hijri.year, hijri.month, hijri.day)


def to_gregorian(year: int, month: int, day: int) -> date:
    try:
        gregorian = Hijri(year, month, day).to_gregorian()
    except OverflowError as e:
        raise ValueError(f"Hijri date {year}-{month}-{day} is outside the supported range") from e
    return date(*gregorian.datetuple())


def events_for_month(month: int, year: Optional[int] = None) -> list[IslamicEvent]:
    """Events falling in a Hijri month, with Gregorian dates when the year is known."""
    month_name(month)
    events = []
    for name, description, kind, event_day, event_month in ISLAMIC_EVENTS:
        if event_month != month:
            continue
        events.append(
            IslamicEvent(
                name=name,
                description=description,
                type=kind,
                hijri_day=event_day,
                hijri_month=event_month,
                gregorian_date=to_gregorian(year, event_month, event_day) if year else None,
            )
        )
    return events


def hijri_date_info(day: date) -> HijriDateResponse:
    hijri = to_hijri(day)
    name = month_name(hijri.month)
    return HijriDateResponse(
        gregorian=day,
        hijri_year=hijri.year,
        hijri_month=hijri.month,
        hijri_day=hijri.day,
        month_name=name,
        formatted=f"{hijri.day} {name} {hijri.year} AH",
        events=events_for_month(hijri.month, hijri.year),
    )
