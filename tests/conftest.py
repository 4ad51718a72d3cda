"""Pytest configuration and fixtures."""

from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config import Settings
from src.db import models  # noqa: F401
from src.db.session import Base, create_session_maker
from src.main import app
from src.middleware.rate_limit import limiter
from src.services.ai import AIProvider, AIService, ChatMessage, ChatResponse
from src.services.hadith import HadithService
from src.services.location import Geocoder
from src.services.prayer import PrayerTimesService
from src.services.quran import QuranClient
from src.services.storage import StorageService

# Fresh in-memory database per test; StaticPool keeps the single connection alive
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


class FakeProvider(AIProvider):
    """Records prompts and returns a canned reply (or raises)."""

    def __init__(self, reply: str = "Test answer", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[ChatMessage]] = []

    async def chat(self, messages, temperature=0.3, max_tokens=2000) -> ChatResponse:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return ChatResponse(content=self.reply, prompt_tokens=12, completion_tokens=8, model="fake-model")


class FakeUpstream:
    """Canned JSON responses for outbound HTTP, keyed by URL without the query string."""

    def __init__(self):
        self.routes: dict[str, tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, payload: object, status_code: int = 200) -> None:
        self.routes[url] = (status_code, payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if url not in self.routes:
            return httpx.Response(404, json={"code": 404, "status": "Not Found"})
        status_code, payload = self.routes[url]
        return httpx.Response(status_code, json=payload)


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of any local .env file."""
    return Settings(_env_file=None, hadith_api_key="", gemini_api_key="", openai_api_key="")


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def storage(test_engine: AsyncEngine) -> StorageService:
    return StorageService(create_session_maker(test_engine))


@pytest.fixture
def ai_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def http_client(upstream: FakeUpstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def app_state(
    storage: StorageService,
    ai_provider: FakeProvider,
    http_client: httpx.AsyncClient,
    test_settings: Settings,
):
    """Install the services the lifespan would build, wired to fakes."""
    app.state.storage = storage
    app.state.ai_service = AIService(test_settings, provider=ai_provider)
    app.state.quran_client = QuranClient(http_client, test_settings)
    app.state.hadith_service = HadithService(http_client, test_settings)
    app.state.geocoder = Geocoder(http_client, test_settings)
    app.state.prayer_service = PrayerTimesService(http_client, test_settings)
    limiter.reset()
    yield app.state
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app_state) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def register(ac: AsyncClient, username: str = "amina", **extra) -> dict:
    """Register an account; the client keeps the session cookie."""
    payload = {"username": username, "password": TEST_PASSWORD, "email": f"{username}@example.com", **extra}
    response = await ac.post("/api/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """HTTP client with a logged-in session."""
    await register(client)
    return client


@pytest_asyncio.fixture
async def other_client(app_state) -> AsyncGenerator[AsyncClient, None]:
    """A second, separately logged-in user."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        await register(ac, "bilal")
        yield ac
