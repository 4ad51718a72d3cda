"""Tests for the Python API client and entity hooks."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.client.api_client import ApiClient, ApiError, QueryCache
from src.client.hooks import INVALIDATION_MAP, EntityHook, use_clients, use_meetings, use_tasks
from src.main import app
from tests.conftest import register


@pytest_asyncio.fixture
async def api(app_state):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await register(ac)
        yield ApiClient(client=ac)


def test_query_cache_invalidates_nested_keys():
    cache = QueryCache()
    cache.set("/api/clients", [])
    cache.set("/api/clients/1/meetings", [])
    cache.set("/api/clientsarchive", [])
    cache.set("/api/reports/summary?from=2026-10-01", {})

    assert cache.invalidate("/api/clients") == 2
    assert cache.keys() == ["/api/clientsarchive", "/api/reports/summary?from=2026-10-01"]
    assert cache.invalidate_many(["/api/reports"]) == 1


def test_every_hook_entity_has_invalidation_keys():
    assert INVALIDATION_MAP["clients"] == ["/api/clients", "/api/meetings", "/api/tasks", "/api/reports"]
    with pytest.raises(ValueError):
        EntityHook(ApiClient(client=AsyncClient()), "unknown", "/api/unknown")


@pytest.mark.asyncio
async def test_api_error_carries_status(api: ApiClient):
    with pytest.raises(ApiError) as exc_info:
        await api.get("/api/clients/999")
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Client 999 not found"


@pytest.mark.asyncio
async def test_hook_create_refreshes_items(api: ApiClient):
    clients = use_clients(api)
    assert await clients.refresh() == []

    created = await clients.create({"firstName": "Omar", "lastName": "Farooq", "email": "omar@example.com"})
    assert [c["id"] for c in clients.items] == [created["id"]]
    assert clients.is_loading is False
    assert clients.error is None


@pytest.mark.asyncio
async def test_client_delete_invalidates_meetings(api: ApiClient):
    clients = use_clients(api)
    meetings = use_meetings(api)
    client = await clients.create({"firstName": "Omar", "lastName": "Farooq", "email": "omar@example.com"})
    await meetings.create({"clientId": client["id"], "title": "Kickoff", "date": "2026-10-20", "startTime": "10:00"})
    assert "/api/meetings" in api.cache

    await clients.delete(client["id"])
    assert "/api/meetings" not in api.cache
    assert clients.items == []


@pytest.mark.asyncio
async def test_hook_write_error_is_stored_and_raised(api: ApiClient):
    meetings = use_meetings(api)
    with pytest.raises(ApiError) as exc_info:
        await meetings.create({"clientId": 999, "title": "Ghost", "date": "2026-10-20", "startTime": "10:00"})
    assert exc_info.value.status == 400
    assert meetings.error is exc_info.value
    assert meetings.is_loading is False


@pytest.mark.asyncio
async def test_task_hook_splits_completed(api: ApiClient):
    tasks = use_tasks(api)
    first = await tasks.create({"title": "Call back"})
    await tasks.create({"title": "Send invoice"})
    await tasks.update(first["id"], {"completed": True})

    assert [t["title"] for t in tasks.completed_items] == ["Call back"]
    assert [t["title"] for t in tasks.pending_items] == ["Send invoice"]
