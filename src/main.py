"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api import (
    ai,
    auth,
    bookmarks,
    calendar,
    crm,
    hadith,
    health,
    places,
    prayer_settings,
    questions,
    quran,
    reading_progress,
    search_history,
    users,
)
from src.config import get_settings
from src.db.session import create_engine, create_session_maker, init_db
from src.middleware.rate_limit import limiter
from src.schemas.schemas import ErrorResponse
from src.services.ai import AIService
from src.services.errors import NoorError
from src.services.hadith import HadithService
from src.services.location import Geocoder
from src.services.prayer import PrayerTimesService
from src.services.quran import QuranClient
from src.services.storage import StorageService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("Starting Noor Companion API...")

    engine = create_engine(settings.database_url, echo=settings.debug)
    app.state.storage = StorageService(create_session_maker(engine))

    # A missing database must not stop the API; storage calls report 503
    try:
        await init_db(engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    ai_client = httpx.AsyncClient(timeout=settings.ai_timeout_seconds)
    app.state.ai_service = AIService(settings, client=ai_client)
    app.state.quran_client = QuranClient(http_client, settings)
    app.state.hadith_service = HadithService(http_client, settings)
    app.state.geocoder = Geocoder(http_client, settings)
    app.state.prayer_service = PrayerTimesService(http_client, settings)

    if not settings.ai_api_key:
        logger.warning(f"No API key set for AI provider '{settings.ai_provider}'; AI endpoints will fail")

    logger.info("Noor Companion API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Noor Companion API...")
    await http_client.aclose()
    await ai_client.aclose()
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Noor Companion API",
    description="""
## Islamic reference and CRM backend

- **Quran**: surahs, translations, recitations, search, verse explanations
- **Hadith**: the six canonical collections, books, chapters and search
- **Prayer**: daily prayer times, Qibla direction, Hijri calendar
- **AI**: questions, term explanations and scholar biographies
- **CRM**: clients, meetings, tasks and summary reports

### Authentication
User-scoped endpoints need a session cookie, set by `POST /api/register`
or `POST /api/login`.

### Rate Limiting
The AI endpoints are rate-limited per user.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NoorError)
async def noor_exception_handler(request: Request, exc: NoorError):
    """Map service errors to their HTTP status."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, detail=exc.detail).model_dump(exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject invalid input with 400 and a field/message list."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": error.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Invalid request", detail=errors).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if settings.debug else "An unexpected error occurred",
        ).model_dump(),
    )


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(bookmarks.router)
app.include_router(prayer_settings.router)
app.include_router(reading_progress.router)
app.include_router(questions.router)
app.include_router(search_history.router)
app.include_router(crm.router)
app.include_router(ai.router)
app.include_router(quran.router)
app.include_router(hadith.router)
app.include_router(places.router)
app.include_router(calendar.router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with service info."""
    return {
        "service": "Noor Companion API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
