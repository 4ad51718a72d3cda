"""Qibla direction, geocoding and daily prayer times."""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import get_geocoder, get_prayer_service, get_storage
from src.auth.security import get_current_user_optional
from src.db.models import User
from src.schemas.schemas import CALCULATION_METHODS, GeocodeResponse, PrayerTimesResponse, QiblaResponse
from src.services.location import Geocoder, distance_to_kaaba_km, qibla_bearing
from src.services.prayer import ASR_SCHOOLS, PrayerTimesService, current_and_next_prayer
from src.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Places"])

Latitude = Query(None, ge=-90, le=90)
Longitude = Query(None, ge=-180, le=180)


@router.get(
    "/qibla",
    response_model=QiblaResponse,
    summary="Qibla direction",
    description="Great-circle bearing and distance from a point to the Kaaba.",
)
async def get_qibla(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
):
    return QiblaResponse(
        latitude=lat,
        longitude=lon,
        direction=round(qibla_bearing(lat, lon), 2),
        distance_km=round(distance_to_kaaba_km(lat, lon), 1),
    )


@router.get("/location/geocode", response_model=GeocodeResponse, summary="Geocode a place name")
async def geocode(
    q: str = Query(..., min_length=1, max_length=200),
    geocoder: Geocoder = Depends(get_geocoder),
):
    return await geocoder.geocode(q)


@router.get(
    "/prayer-times",
    response_model=PrayerTimesResponse,
    summary="Daily prayer times",
    description=(
        "Pass either lat and lon or a city name. Logged-in users get their saved "
        "calculation method, Asr school and adjustments applied."
    ),
)
async def get_prayer_times(
    lat: Optional[float] = Latitude,
    lon: Optional[float] = Longitude,
    city: Optional[str] = Query(None, min_length=1, max_length=200),
    day: Optional[date] = Query(None, alias="date"),
    method: Optional[str] = Query(None, description=f"One of {', '.join(CALCULATION_METHODS)}"),
    school: Optional[str] = Query(None, description=f"One of {', '.join(ASR_SCHOOLS)}"),
    user: Optional[User] = Depends(get_current_user_optional),
    storage: StorageService = Depends(get_storage),
    geocoder: Geocoder = Depends(get_geocoder),
    prayer: PrayerTimesService = Depends(get_prayer_service),
):
    if lat is None or lon is None:
        if not city:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Provide lat and lon, or city",
            )
        place = await geocoder.geocode(city)
        lat, lon = place.latitude, place.longitude

    calculation_method, asr_method, adjustments = "MWL", "Standard", None
    if user is not None:
        saved = await storage.get_prayer_settings(user.id)
        if saved is not None:
            calculation_method = saved.calculation_method
            asr_method = saved.asr_method
            adjustments = saved.adjustments
    calculation_method = method or calculation_method
    asr_method = school or asr_method

    if calculation_method not in CALCULATION_METHODS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown calculation method: {calculation_method}",
        )
    if asr_method not in ASR_SCHOOLS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown Asr method: {asr_method}",
        )

    daily = await prayer.get_timings(
        lat,
        lon,
        day or date.today(),
        calculation_method=calculation_method,
        asr_method=asr_method,
        adjustments=adjustments,
    )
    now = datetime.now(daily.timezone or timezone.utc)
    times = daily.as_datetimes()
    if daily.timezone is None:
        times = {p: t.replace(tzinfo=timezone.utc) for p, t in times.items()}
    current, upcoming, upcoming_at = current_and_next_prayer(times, now)

    return PrayerTimesResponse(
        date=daily.day,
        latitude=lat,
        longitude=lon,
        calculation_method=calculation_method,
        asr_method=asr_method,
        timings=daily.timings,
        current_prayer=current,
        next_prayer=upcoming,
        next_prayer_time=upcoming_at,
    )
