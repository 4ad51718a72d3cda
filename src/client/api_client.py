"""
HTTP client for the Noor Companion REST API.

Keeps the session cookie between calls and caches list responses until a
write invalidates them.
"""

import logging
from typing import Any, Iterable, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status: int, message: str, detail: Any = None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.detail = detail


class QueryCache:
    """Responses of GET requests keyed by path."""

    def __init__(self):
        self._entries: dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Any:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def keys(self) -> list[str]:
        return list(self._entries)

    def invalidate(self, key: str) -> int:
        """Drop `key` and every entry below it (`key/...` or `key?...`)."""
        stale = [k for k in self._entries if k == key or k.startswith((f"{key}/", f"{key}?"))]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def invalidate_many(self, keys: Iterable[str]) -> int:
        return sum(self.invalidate(key) for key in keys)

    def clear(self) -> None:
        self._entries.clear()


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None
    if isinstance(body, dict):
        return str(body.get("error") or response.reason_phrase), body.get("detail")
    return response.reason_phrase, body


class ApiClient:
    """Thin async wrapper over httpx for the REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[QueryCache] = None,
        timeout: float = 15.0,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.cache = cache or QueryCache()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Returns None for empty responses (204). Raises ApiError for any
        non-2xx status, with the server's `error` field as the message.
        """
        response = await self.client.request(method, path, json=json, params=params)
        if response.is_error:
            message, detail = _error_message(response)
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message, detail)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def query(self, path: str, force: bool = False) -> Any:
        """GET through the cache."""
        if not force and path in self.cache:
            return self.cache.get(path)
        data = await self.get(path)
        self.cache.set(path, data)
        return data

    # ============== Session ==============

    async def login(self, username: str, password: str) -> dict:
        user = await self.post("/api/login", {"username": username, "password": password})
        self.cache.clear()
        return user

    async def logout(self) -> None:
        await self.post("/api/logout")
        self.cache.clear()
