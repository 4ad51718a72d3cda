"""Tests for the storage adapter."""

import datetime as dt

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from src.db.models import ContentType, QuestionStatus
from src.db.session import create_session_maker
from src.services.errors import DuplicateRecordError, StorageUnavailableError
from src.services.storage import StorageService


async def _user(storage: StorageService, username: str = "amina"):
    return await storage.create_user(
        {"username": username, "password": "hash", "email": f"{username}@example.com"}
    )


@pytest.mark.asyncio
async def test_create_returns_persisted_record(storage: StorageService):
    user = await _user(storage)
    assert user.id is not None
    assert user.language == "en"
    assert user.created_at is not None
    assert (await storage.get_user_by_username("amina")).id == user.id
    assert (await storage.get_user_by_email("amina@example.com")).id == user.id


@pytest.mark.asyncio
async def test_missing_records(storage: StorageService):
    assert await storage.get_user(999) is None
    assert await storage.list_bookmarks(999) == []
    assert await storage.update_client(999, {"notes": "x"}) is None
    assert await storage.delete_task(999) is False


@pytest.mark.asyncio
async def test_empty_update_returns_unchanged(storage: StorageService):
    user = await _user(storage)
    bookmark = await storage.create_bookmark(
        {"user_id": user.id, "type": ContentType.QURAN, "reference": {"surah": 1, "ayah": 1}}
    )
    unchanged = await storage.update_bookmark(bookmark.id, {})
    assert unchanged.reference == {"surah": 1, "ayah": 1}


@pytest.mark.asyncio
async def test_duplicate_username_raises(storage: StorageService):
    await _user(storage)
    with pytest.raises(DuplicateRecordError):
        await _user(storage)


@pytest.mark.asyncio
async def test_prayer_settings_unique_per_user(storage: StorageService):
    user = await _user(storage)
    await storage.create_prayer_settings({"user_id": user.id})
    with pytest.raises(DuplicateRecordError):
        await storage.create_prayer_settings({"user_id": user.id, "calculation_method": "ISNA"})

    updated = await storage.update_prayer_settings(user.id, {"asr_method": "Hanafi"})
    assert updated.asr_method == "Hanafi"
    assert updated.calculation_method == "MWL"
    assert await storage.delete_prayer_settings(user.id) is True
    assert await storage.get_prayer_settings(user.id) is None


@pytest.mark.asyncio
async def test_question_filters(storage: StorageService):
    amina = await _user(storage)
    bilal = await _user(storage, "bilal")
    await storage.create_question({"user_id": amina.id, "question": "What is zakat?"})
    await storage.create_question(
        {"user_id": amina.id, "question": "What is salah?", "answer": "Prayer", "status": QuestionStatus.ANSWERED}
    )
    await storage.create_question({"user_id": bilal.id, "question": "What is hajj?"})

    assert len(await storage.list_pending_questions()) == 2
    assert [q.question for q in await storage.list_pending_questions(amina.id)] == ["What is zakat?"]
    assert [q.question for q in await storage.list_answered_questions(amina.id)] == ["What is salah?"]


@pytest.mark.asyncio
async def test_deleting_client_keeps_meetings_and_tasks(storage: StorageService):
    user = await _user(storage)
    client = await storage.create_client(
        {"user_id": user.id, "first_name": "Omar", "last_name": "Farooq", "email": "omar@example.com"}
    )
    await storage.create_meeting(
        {
            "user_id": user.id,
            "client_id": client.id,
            "title": "Kickoff",
            "date": dt.date(2026, 10, 20),
            "start_time": "10:00",
        }
    )
    await storage.create_task({"user_id": user.id, "client_id": client.id, "title": "Send proposal"})

    assert await storage.delete_client(client.id) is True
    assert len(await storage.list_meetings_by_client(client.id)) == 1
    assert len(await storage.list_tasks_by_client(client.id)) == 1


@pytest.mark.asyncio
async def test_meetings_listed_by_date_and_start_time(storage: StorageService):
    user = await _user(storage)
    for title, day, start in (
        ("Review", dt.date(2026, 10, 22), "09:00"),
        ("Lunch", dt.date(2026, 10, 20), "12:30"),
        ("Kickoff", dt.date(2026, 10, 20), "10:00"),
    ):
        await storage.create_meeting(
            {"user_id": user.id, "client_id": 1, "title": title, "date": day, "start_time": start}
        )

    meetings = await storage.list_meetings(user.id)
    assert [m.title for m in meetings] == ["Kickoff", "Lunch", "Review"]


@pytest.mark.asyncio
async def test_delete_user(storage: StorageService):
    user = await _user(storage)
    assert await storage.delete_user(user.id) is True
    assert await storage.get_user(user.id) is None
    assert await storage.delete_user(user.id) is False


@pytest.mark.asyncio
async def test_search_history_clear(storage: StorageService):
    user = await _user(storage)
    for query in ("mercy", "patience"):
        await storage.create_search_history_item({"user_id": user.id, "query": query})
    assert [i.query for i in await storage.list_search_history(user.id)] == ["patience", "mercy"]
    assert await storage.clear_search_history(user.id) is True
    assert await storage.list_search_history(user.id) == []


@pytest.mark.asyncio
async def test_backend_failure_is_not_reported_as_missing():
    # Tables were never created, so every query fails
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    storage = StorageService(create_session_maker(engine))
    try:
        with pytest.raises(StorageUnavailableError):
            await storage.get_user(1)
        with pytest.raises(StorageUnavailableError):
            await storage.create_search_history_item({"user_id": 1, "query": "x"})
        assert await storage.ping() is True
    finally:
        await engine.dispose()
