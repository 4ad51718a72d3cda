"""Tests for Hijri conversion and Islamic events."""

from datetime import date

import pytest
from httpx import AsyncClient

from src.services.calendar import ISLAMIC_EVENTS, events_for_month, month_name, to_gregorian, to_hijri


def test_to_hijri_known_dates():
    assert to_hijri(date(2024, 3, 11)) == (1445, 9, 1)  # 1 Ramadan 1445
    assert to_hijri(date(2023, 7, 19)) == (1445, 1, 1)  # Islamic New Year 1445


def test_to_gregorian():
    assert to_gregorian(1445, 10, 1) == date(2024, 4, 10)  # Eid al-Fitr


def test_out_of_range_is_value_error():
    with pytest.raises(ValueError):
        to_hijri(date(1800, 1, 1))


def test_month_name():
    assert month_name(9) == "Ramadan"
    with pytest.raises(ValueError):
        month_name(13)


def test_events_for_month():
    ramadan = events_for_month(9)
    assert [e.name for e in ramadan] == ["Beginning of Ramadan", "Laylat al-Qadr"]
    assert all(e.gregorian_date is None for e in ramadan)

    dhul_hijjah = events_for_month(12, 1445)
    eid = next(e for e in dhul_hijjah if e.name == "Eid al-Adha")
    assert eid.gregorian_date == date(2024, 6, 16)
    assert eid.type == "holiday"


def test_event_list_is_complete():
    assert len(ISLAMIC_EVENTS) == 8
    assert events_for_month(2) == []


@pytest.mark.asyncio
async def test_hijri_route(client: AsyncClient):
    data = (await client.get("/api/calendar/hijri", params={"date": "2024-03-11"})).json()
    assert data["hijriYear"] == 1445
    assert data["monthName"] == "Ramadan"
    assert data["formatted"] == "1 Ramadan 1445 AH"
    assert [e["name"] for e in data["events"]] == ["Beginning of Ramadan", "Laylat al-Qadr"]
    assert data["events"][0]["gregorianDate"] == "2024-03-11"


@pytest.mark.asyncio
async def test_hijri_route_defaults_to_today(client: AsyncClient):
    response = await client.get("/api/calendar/hijri")
    assert response.status_code == 200
    assert response.json()["gregorian"] == date.today().isoformat()


@pytest.mark.asyncio
async def test_hijri_route_out_of_range(client: AsyncClient):
    response = await client.get("/api/calendar/hijri", params={"date": "1800-01-01"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_events_route(client: AsyncClient):
    data = (await client.get("/api/calendar/events", params={"month": 10})).json()
    assert [e["name"] for e in data] == ["Eid al-Fitr"]
    assert (await client.get("/api/calendar/events", params={"month": 13})).status_code == 400
