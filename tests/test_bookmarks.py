"""Tests for bookmark, reading progress and search history routes."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_bookmarks_require_session(client: AsyncClient):
    assert (await client.get("/api/bookmarks")).status_code == 401
    response = await client.post("/api/bookmarks", json={"type": "quran", "reference": {"surah": 1, "ayah": 1}})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_and_list_bookmarks(auth_client: AsyncClient):
    quran = await auth_client.post(
        "/api/bookmarks",
        json={"type": "quran", "reference": {"surah": 2, "ayah": 255}, "note": "Ayat al-Kursi"},
    )
    assert quran.status_code == 201
    assert quran.json()["reference"] == {"surah": 2, "ayah": 255}

    hadith = await auth_client.post(
        "/api/bookmarks",
        json={"type": "hadith", "reference": {"collection": "bukhari", "number": 1}},
    )
    assert hadith.status_code == 201
    assert hadith.json()["reference"] == {"collection": "bukhari", "number": "1"}

    assert len((await auth_client.get("/api/bookmarks")).json()) == 2
    by_type = (await auth_client.get("/api/bookmarks/type/hadith")).json()
    assert [b["type"] for b in by_type] == ["hadith"]


@pytest.mark.asyncio
async def test_bookmark_without_type_is_rejected(auth_client: AsyncClient):
    response = await auth_client.post("/api/bookmarks", json={"reference": {"surah": 2, "ayah": 255}})
    assert response.status_code == 400
    assert (await auth_client.get("/api/bookmarks")).json() == []


@pytest.mark.asyncio
async def test_bookmark_reference_must_match_type(auth_client: AsyncClient):
    response = await auth_client.post(
        "/api/bookmarks",
        json={"type": "quran", "reference": {"collection": "bukhari", "number": "1"}},
    )
    assert response.status_code == 400

    response = await auth_client.post("/api/bookmarks", json={"type": "quran", "reference": {"surah": 115, "ayah": 1}})
    assert response.status_code == 400
    assert (await auth_client.get("/api/bookmarks")).json() == []


@pytest.mark.asyncio
async def test_update_bookmark(auth_client: AsyncClient):
    created = (
        await auth_client.post("/api/bookmarks", json={"type": "quran", "reference": {"surah": 1, "ayah": 1}})
    ).json()

    response = await auth_client.patch(f"/api/bookmarks/{created['id']}", json={"note": "Opening"})
    assert response.status_code == 200
    assert response.json()["note"] == "Opening"

    # Switching type without a matching reference
    response = await auth_client.patch(f"/api/bookmarks/{created['id']}", json={"type": "hadith"})
    assert response.status_code == 400

    response = await auth_client.patch(
        f"/api/bookmarks/{created['id']}",
        json={"type": "hadith", "reference": {"collection": "muslim", "number": "2564"}},
    )
    assert response.status_code == 200
    assert response.json()["type"] == "hadith"


@pytest.mark.asyncio
async def test_delete_bookmark_twice(auth_client: AsyncClient):
    created = (
        await auth_client.post("/api/bookmarks", json={"type": "quran", "reference": {"surah": 1, "ayah": 1}})
    ).json()
    assert (await auth_client.delete(f"/api/bookmarks/{created['id']}")).status_code == 204
    assert (await auth_client.delete(f"/api/bookmarks/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_other_users_bookmark_is_not_found(auth_client: AsyncClient, other_client: AsyncClient):
    created = (
        await auth_client.post("/api/bookmarks", json={"type": "quran", "reference": {"surah": 1, "ayah": 1}})
    ).json()
    assert (await other_client.get(f"/api/bookmarks/{created['id']}")).status_code == 404
    assert (await other_client.delete(f"/api/bookmarks/{created['id']}")).status_code == 404
    assert (await auth_client.get(f"/api/bookmarks/{created['id']}")).status_code == 200


@pytest.mark.asyncio
async def test_reading_progress_upsert(auth_client: AsyncClient):
    first = await auth_client.post(
        "/api/reading-progress",
        json={"type": "quran", "lastRead": {"surah": 2, "ayah": 10}, "completionPercentage": 5},
    )
    assert first.status_code == 201

    second = await auth_client.post(
        "/api/reading-progress",
        json={"type": "quran", "lastRead": {"surah": 3, "ayah": 1}, "completionPercentage": 12},
    )
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    current = (await auth_client.get("/api/reading-progress/quran")).json()
    assert current["lastRead"] == {"surah": 3, "ayah": 1}
    assert current["completionPercentage"] == 12
    assert (await auth_client.get("/api/reading-progress/hadith")).status_code == 404


@pytest.mark.asyncio
async def test_reading_progress_patch_validates_shape(auth_client: AsyncClient):
    created = (
        await auth_client.post(
            "/api/reading-progress",
            json={"type": "hadith", "lastRead": {"collection": "bukhari", "number": "1"}},
        )
    ).json()

    response = await auth_client.patch(
        f"/api/reading-progress/{created['id']}", json={"lastRead": {"surah": 1, "ayah": 1}}
    )
    assert response.status_code == 400

    response = await auth_client.patch(f"/api/reading-progress/{created['id']}", json={"completionPercentage": 150})
    assert response.status_code == 400

    response = await auth_client.patch(f"/api/reading-progress/{created['id']}", json={"completionPercentage": 40})
    assert response.json()["completionPercentage"] == 40


@pytest.mark.asyncio
async def test_search_history(auth_client: AsyncClient):
    for query in ("mercy", "patience"):
        response = await auth_client.post("/api/search-history", json={"query": query})
        assert response.status_code == 201

    items = (await auth_client.get("/api/search-history")).json()
    assert [i["query"] for i in items] == ["patience", "mercy"]

    assert (await auth_client.delete("/api/search-history")).status_code == 204
    assert (await auth_client.get("/api/search-history")).json() == []


@pytest.mark.asyncio
async def test_prayer_settings_lifecycle(auth_client: AsyncClient):
    assert (await auth_client.get("/api/prayer-settings")).status_code == 404

    created = await auth_client.post(
        "/api/prayer-settings",
        json={"calculationMethod": "ISNA", "asrMethod": "Hanafi", "adjustments": {"fajr": 2}},
    )
    assert created.status_code == 201
    assert created.json()["notificationsEnabled"] is True

    assert (await auth_client.post("/api/prayer-settings", json={})).status_code == 409

    patched = await auth_client.patch("/api/prayer-settings", json={"calculationMethod": "Karachi"})
    assert patched.json()["calculationMethod"] == "Karachi"
    assert patched.json()["asrMethod"] == "Hanafi"
    assert patched.json()["adjustments"] == {"fajr": 2}

    cleared = await auth_client.patch("/api/prayer-settings", json={"adjustments": None, "asrMethod": None})
    assert cleared.status_code == 200
    assert cleared.json()["adjustments"] is None
    assert cleared.json()["asrMethod"] == "Hanafi"

    bad = await auth_client.patch("/api/prayer-settings", json={"calculationMethod": "Nowhere"})
    assert bad.status_code == 400

    assert (await auth_client.delete("/api/prayer-settings")).status_code == 204
    assert (await auth_client.get("/api/prayer-settings")).status_code == 404
