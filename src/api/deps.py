"""Request-scoped accessors for the services built in the application lifespan."""

from fastapi import Request

from src.config import get_settings
from src.services.ai import AIService
from src.services.hadith import HadithService
from src.services.location import Geocoder
from src.services.prayer import PrayerTimesService
from src.services.quran import QuranClient
from src.services.storage import StorageService


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage


def get_ai_service(request: Request) -> AIService:
    service = getattr(request.app.state, "ai_service", None)
    if service is None:
        # No lifespan (e.g. bare TestClient); fails at call time as unconfigured
        service = AIService(get_settings())
    return service


def get_quran_client(request: Request) -> QuranClient:
    return request.app.state.quran_client


def get_hadith_service(request: Request) -> HadithService:
    service = getattr(request.app.state, "hadith_service", None)
    if service is None:
        service = HadithService(None, get_settings())
    return service


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_prayer_service(request: Request) -> PrayerTimesService:
    return request.app.state.prayer_service
