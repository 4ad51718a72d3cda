"""Great-circle helpers, Qibla direction and geocoding."""

import logging
import math

import httpx

from src.config import Settings
from src.schemas.schemas import GeocodeResponse
from src.services.errors import LocationNotFoundError, UpstreamServiceError

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
KAABA_LATITUDE = 21.4225
KAABA_LONGITUDE = 39.8262


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def qibla_bearing(latitude: float, longitude: float) -> float:
    """Initial bearing to the Kaaba in degrees clockwise from true north, in [0, 360)."""
    phi = math.radians(latitude)
    phi_k = math.radians(KAABA_LATITUDE)
    d_lon = math.radians(KAABA_LONGITUDE - longitude)
    y = math.sin(d_lon) * math.cos(phi_k)
    x = math.cos(phi) * math.sin(phi_k) - math.sin(phi) * math.cos(phi_k) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def distance_to_kaaba_km(latitude: float, longitude: float) -> float:
    return haversine_km(latitude, longitude, KAABA_LATITUDE, KAABA_LONGITUDE)


class Geocoder:
    """Place name to coordinates via Nominatim."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.base_url = settings.geocoding_api_url.rstrip("/")
        self.user_agent = settings.geocoding_user_agent

    async def geocode(self, query: str) -> GeocodeResponse:
        try:
            response = await self.client.get(
                f"{self.base_url}/search",
                params={"format": "json", "limit": 1, "q": query},
                headers={"User-Agent": self.user_agent},
            )
            response.raise_for_status()
            results = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed for '{query}': {e}")
            raise UpstreamServiceError(f"Geocoding request failed: {e}") from e

        if not results:
            raise LocationNotFoundError(f'Location "{query}" not found')

        first = results[0]
        return GeocodeResponse(
            query=query,
            latitude=float(first["lat"]),
            longitude=float(first["lon"]),
            display_name=first.get("display_name"),
        )
