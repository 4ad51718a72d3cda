"""Health check routes."""

import logging

import redis.asyncio as redis
from fastapi import APIRouter, Depends
from redis.exceptions import RedisError

from src.api.deps import get_storage
from src.config import get_settings
from src.schemas.schemas import HealthResponse
from src.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])

settings = get_settings()


async def _rate_limit_storage_status() -> str:
    uri = settings.rate_limit_storage_uri
    if not uri.startswith(("redis://", "rediss://")):
        return "memory"

    client = redis.from_url(uri)
    try:
        await client.ping()
        return "ok"
    except (RedisError, OSError) as e:
        logger.warning(f"Rate limit storage unreachable: {e}")
        return "error"
    finally:
        await client.aclose()


async def health_check(storage: StorageService = Depends(get_storage)):
    """
    Health check endpoint.

    Returns the status of:
    - API server
    - Database connection
    - Rate limit storage (Redis, or "memory" for the in-process store)
    """
    db_status = "ok" if await storage.ping() else "error"
    limiter_status = await _rate_limit_storage_status()

    overall_status = "healthy"
    if "error" in (db_status, limiter_status):
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version="1.0.0",
        database=db_status,
        rate_limit_storage=limiter_status,
    )


for path in ("/health", "/api/health"):
    router.add_api_route(
        path,
        health_check,
        methods=["GET"],
        response_model=HealthResponse,
        summary="Health check",
        description="Check the health status of the service and its dependencies.",
    )
