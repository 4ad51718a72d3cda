"""Hijri calendar routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from src.schemas.schemas import HijriDateResponse, IslamicEvent
from src.services.calendar import events_for_month, hijri_date_info

router = APIRouter(prefix="/api/calendar", tags=["Calendar"])


@router.get(
    "/hijri",
    response_model=HijriDateResponse,
    summary="Convert to the Hijri calendar",
    description="Defaults to today. Includes the Islamic events of the resulting Hijri month.",
)
async def get_hijri_date(day: Optional[date] = Query(None, alias="date")):
    try:
        return hijri_date_info(day or date.today())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/events", response_model=list[IslamicEvent], summary="Islamic events in a Hijri month")
async def get_events(
    month: int = Query(..., ge=1, le=12),
    year: Optional[int] = Query(None, ge=1343, le=1500),
):
    try:
        return events_for_month(month, year)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
