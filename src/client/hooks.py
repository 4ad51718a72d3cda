"""Entity data hooks over ApiClient.

Each hook holds the cached list of one entity and invalidates related
cache keys after every write, so other hooks refetch on their next refresh.
"""

import logging
from typing import Any, Optional

from src.client.api_client import ApiClient

logger = logging.getLogger(__name__)

# Entity -> cache keys made stale by a write to that entity.
# Clients cover nested keys such as /api/clients/{id}/meetings.
INVALIDATION_MAP: dict[str, list[str]] = {
    "clients": ["/api/clients", "/api/meetings", "/api/tasks", "/api/reports"],
    "meetings": ["/api/meetings", "/api/clients", "/api/reports"],
    "tasks": ["/api/tasks", "/api/clients", "/api/reports"],
    "bookmarks": ["/api/bookmarks"],
    "questions": ["/api/questions"],
    "reading_progress": ["/api/reading-progress"],
}


class EntityHook:
    """List state and write operations for one entity collection."""

    def __init__(self, api: ApiClient, entity: str, path: str):
        if entity not in INVALIDATION_MAP:
            raise ValueError(f"No invalidation keys declared for {entity}")
        self.api = api
        self.entity = entity
        self.path = path
        self.items: list[dict] = []
        self.is_loading = False
        self.error: Optional[Exception] = None

    async def refresh(self, force: bool = False) -> list[dict]:
        """Load the list, from the cache unless it was invalidated."""
        self.is_loading = True
        try:
            self.items = await self.api.query(self.path, force=force) or []
            self.error = None
        except Exception as e:
            self.error = e
            raise
        finally:
            self.is_loading = False
        return self.items

    async def _write(self, method: str, path: str, data: Any = None) -> Any:
        self.is_loading = True
        try:
            result = await self.api.request(method, path, json=data)
            self.error = None
        except Exception as e:
            logger.error(f"{method} {path} failed: {e}")
            self.error = e
            raise
        finally:
            self.is_loading = False

        self.api.cache.invalidate_many(INVALIDATION_MAP[self.entity])
        await self.refresh()
        return result

    async def create(self, data: dict) -> dict:
        return await self._write("POST", self.path, data)

    async def update(self, item_id: int, partial: dict) -> dict:
        return await self._write("PATCH", f"{self.path}/{item_id}", partial)

    async def delete(self, item_id: int) -> None:
        await self._write("DELETE", f"{self.path}/{item_id}")


class TaskHook(EntityHook):
    @property
    def completed_items(self) -> list[dict]:
        return [t for t in self.items if t.get("completed")]

    @property
    def pending_items(self) -> list[dict]:
        return [t for t in self.items if not t.get("completed")]


def use_clients(api: ApiClient) -> EntityHook:
    return EntityHook(api, "clients", "/api/clients")


def use_meetings(api: ApiClient) -> EntityHook:
    return EntityHook(api, "meetings", "/api/meetings")


def use_tasks(api: ApiClient) -> TaskHook:
    return TaskHook(api, "tasks", "/api/tasks")


def use_bookmarks(api: ApiClient) -> EntityHook:
    return EntityHook(api, "bookmarks", "/api/bookmarks")


def use_questions(api: ApiClient) -> EntityHook:
    return EntityHook(api, "questions", "/api/questions")


def use_reading_progress(api: ApiClient) -> EntityHook:
    return EntityHook(api, "reading_progress", "/api/reading-progress")
