"""Storage adapter: typed CRUD over the relational database.

One table per entity, one session (and one round trip) per call. Lookups
return ``None``/``[]``/``False`` when the record does not exist; backend
failures are logged and raised as ``StorageUnavailableError`` so callers can
tell "missing" apart from "database down".
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence, TypeVar

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import (
    Bookmark,
    Client,
    ContentType,
    Meeting,
    PrayerSettings,
    Question,
    QuestionStatus,
    ReadingProgress,
    SearchHistoryItem,
    Task,
    User,
)
from src.db.session import Base
from src.services.errors import DuplicateRecordError, StorageUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class StorageService:
    """CRUD operations for every persisted entity."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    # ============== Generic helpers ==============

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                yield session
        except IntegrityError as e:
            logger.warning(f"Integrity error while {action}: {e.orig}")
            raise DuplicateRecordError(f"Duplicate record while {action}") from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error {action}: {e}")
            raise StorageUnavailableError(f"Database unavailable while {action}") from e

    async def _get(self, model: type[ModelT], record_id: int, action: str) -> Optional[ModelT]:
        async with self._session(action) as session:
            return await session.get(model, record_id)

    async def _first(self, model: type[ModelT], action: str, *criteria) -> Optional[ModelT]:
        async with self._session(action) as session:
            result = await session.execute(select(model).where(*criteria).limit(1))
            return result.scalars().first()

    async def _list(
        self, model: type[ModelT], action: str, *criteria, order_by: Sequence = ()
    ) -> list[ModelT]:
        query = select(model).where(*criteria).order_by(*(order_by or (model.id,)))
        async with self._session(action) as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def _create(self, model: type[ModelT], data: dict[str, Any], action: str) -> ModelT:
        record = model(**data)
        async with self._session(action) as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)
        return record

    async def _update(
        self, model: type[ModelT], record_id: int, data: dict[str, Any], action: str
    ) -> Optional[ModelT]:
        async with self._session(action) as session:
            record = await session.get(model, record_id)
            if record is None:
                return None
            if data:
                for field, value in data.items():
                    setattr(record, field, value)
                await session.commit()
                await session.refresh(record)
            return record

    async def _delete(self, model: type[ModelT], record_id: int, action: str) -> bool:
        async with self._session(action) as session:
            record = await session.get(model, record_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()
            return True

    async def ping(self) -> bool:
        """Check that the database answers."""
        try:
            async with self._session("pinging database") as session:
                await session.execute(text("SELECT 1"))
            return True
        except StorageUnavailableError:
            return False

    # ============== Users ==============

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._get(User, user_id, "getting user")

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._first(User, "getting user by username", User.username == username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._first(User, "getting user by email", User.email == email)

    async def create_user(self, data: dict[str, Any]) -> User:
        """Insert a user. ``data["password"]`` must already be hashed."""
        return await self._create(User, data, "creating user")

    async def update_user(self, user_id: int, data: dict[str, Any]) -> Optional[User]:
        return await self._update(User, user_id, data, "updating user")

    async def delete_user(self, user_id: int) -> bool:
        return await self._delete(User, user_id, "deleting user")

    # ============== Bookmarks ==============

    async def get_bookmark(self, bookmark_id: int) -> Optional[Bookmark]:
        return await self._get(Bookmark, bookmark_id, "getting bookmark")

    async def list_bookmarks(self, user_id: int) -> list[Bookmark]:
        return await self._list(Bookmark, "getting bookmarks", Bookmark.user_id == user_id)

    async def list_bookmarks_by_type(self, user_id: int, content_type: ContentType) -> list[Bookmark]:
        return await self._list(
            Bookmark,
            "getting bookmarks by type",
            Bookmark.user_id == user_id,
            Bookmark.type == content_type,
        )

    async def create_bookmark(self, data: dict[str, Any]) -> Bookmark:
        return await self._create(Bookmark, data, "creating bookmark")

    async def update_bookmark(self, bookmark_id: int, data: dict[str, Any]) -> Optional[Bookmark]:
        return await self._update(Bookmark, bookmark_id, data, "updating bookmark")

    async def delete_bookmark(self, bookmark_id: int) -> bool:
        return await self._delete(Bookmark, bookmark_id, "deleting bookmark")

    # ============== Prayer Settings ==============

    async def get_prayer_settings(self, user_id: int) -> Optional[PrayerSettings]:
        return await self._first(
            PrayerSettings, "getting prayer settings", PrayerSettings.user_id == user_id
        )

    async def create_prayer_settings(self, data: dict[str, Any]) -> PrayerSettings:
        return await self._create(PrayerSettings, data, "creating prayer settings")

    async def update_prayer_settings(
        self, user_id: int, data: dict[str, Any]
    ) -> Optional[PrayerSettings]:
        settings = await self.get_prayer_settings(user_id)
        if settings is None:
            return None
        return await self._update(PrayerSettings, settings.id, data, "updating prayer settings")

    async def delete_prayer_settings(self, user_id: int) -> bool:
        settings = await self.get_prayer_settings(user_id)
        if settings is None:
            return False
        return await self._delete(PrayerSettings, settings.id, "deleting prayer settings")

    # ============== Reading Progress ==============

    async def get_reading_progress_by_id(self, progress_id: int) -> Optional[ReadingProgress]:
        return await self._get(ReadingProgress, progress_id, "getting reading progress")

    async def get_reading_progress(
        self, user_id: int, content_type: ContentType
    ) -> Optional[ReadingProgress]:
        return await self._first(
            ReadingProgress,
            "getting reading progress",
            ReadingProgress.user_id == user_id,
            ReadingProgress.type == content_type,
        )

    async def list_reading_progress(self, user_id: int) -> list[ReadingProgress]:
        return await self._list(
            ReadingProgress, "listing reading progress", ReadingProgress.user_id == user_id
        )

    async def create_reading_progress(self, data: dict[str, Any]) -> ReadingProgress:
        return await self._create(ReadingProgress, data, "creating reading progress")

    async def update_reading_progress(
        self, progress_id: int, data: dict[str, Any]
    ) -> Optional[ReadingProgress]:
        return await self._update(ReadingProgress, progress_id, data, "updating reading progress")

    async def delete_reading_progress(self, progress_id: int) -> bool:
        return await self._delete(ReadingProgress, progress_id, "deleting reading progress")

    # ============== Questions ==============

    async def get_question(self, question_id: int) -> Optional[Question]:
        return await self._get(Question, question_id, "getting question")

    async def list_questions(self, user_id: int) -> list[Question]:
        return await self._list(
            Question, "getting questions", Question.user_id == user_id, order_by=(Question.id.desc(),)
        )

    async def list_pending_questions(self, user_id: Optional[int] = None) -> list[Question]:
        """Pending questions, across all users unless a user id is given."""
        criteria = [Question.status == QuestionStatus.PENDING]
        if user_id is not None:
            criteria.append(Question.user_id == user_id)
        return await self._list(Question, "getting pending questions", *criteria)

    async def list_answered_questions(self, user_id: int) -> list[Question]:
        return await self._list(
            Question,
            "getting answered questions",
            Question.user_id == user_id,
            Question.status == QuestionStatus.ANSWERED,
            order_by=(Question.id.desc(),),
        )

    async def create_question(self, data: dict[str, Any]) -> Question:
        return await self._create(Question, data, "creating question")

    async def update_question(self, question_id: int, data: dict[str, Any]) -> Optional[Question]:
        return await self._update(Question, question_id, data, "updating question")

    async def delete_question(self, question_id: int) -> bool:
        return await self._delete(Question, question_id, "deleting question")

    # ============== Search History ==============

    async def list_search_history(self, user_id: int) -> list[SearchHistoryItem]:
        return await self._list(
            SearchHistoryItem,
            "getting search history",
            SearchHistoryItem.user_id == user_id,
            order_by=(SearchHistoryItem.id.desc(),),
        )

    async def create_search_history_item(self, data: dict[str, Any]) -> SearchHistoryItem:
        return await self._create(SearchHistoryItem, data, "creating search history item")

    async def clear_search_history(self, user_id: int) -> bool:
        async with self._session("clearing search history") as session:
            await session.execute(
                delete(SearchHistoryItem).where(SearchHistoryItem.user_id == user_id)
            )
            await session.commit()
        return True

    # ============== Clients ==============

    async def get_client(self, client_id: int) -> Optional[Client]:
        return await self._get(Client, client_id, "getting client")

    async def list_clients(self, user_id: int) -> list[Client]:
        return await self._list(Client, "getting clients", Client.user_id == user_id)

    async def create_client(self, data: dict[str, Any]) -> Client:
        return await self._create(Client, data, "creating client")

    async def update_client(self, client_id: int, data: dict[str, Any]) -> Optional[Client]:
        return await self._update(Client, client_id, data, "updating client")

    async def delete_client(self, client_id: int) -> bool:
        """Delete a client. Its meetings and tasks are left in place."""
        return await self._delete(Client, client_id, "deleting client")

    # ============== Meetings ==============

    async def get_meeting(self, meeting_id: int) -> Optional[Meeting]:
        return await self._get(Meeting, meeting_id, "getting meeting")

    async def list_meetings(self, user_id: int) -> list[Meeting]:
        return await self._list(
            Meeting,
            "getting meetings",
            Meeting.user_id == user_id,
            order_by=(Meeting.date, Meeting.start_time),
        )

    async def list_meetings_by_client(self, client_id: int) -> list[Meeting]:
        return await self._list(Meeting, "getting meetings by client", Meeting.client_id == client_id)

    async def create_meeting(self, data: dict[str, Any]) -> Meeting:
        return await self._create(Meeting, data, "creating meeting")

    async def update_meeting(self, meeting_id: int, data: dict[str, Any]) -> Optional[Meeting]:
        return await self._update(Meeting, meeting_id, data, "updating meeting")

    async def delete_meeting(self, meeting_id: int) -> bool:
        return await self._delete(Meeting, meeting_id, "deleting meeting")

    # ============== Tasks ==============

    async def get_task(self, task_id: int) -> Optional[Task]:
        return await self._get(Task, task_id, "getting task")

    async def list_tasks(self, user_id: int) -> list[Task]:
        return await self._list(Task, "getting tasks", Task.user_id == user_id)

    async def list_tasks_by_client(self, client_id: int) -> list[Task]:
        return await self._list(Task, "getting tasks by client", Task.client_id == client_id)

    async def create_task(self, data: dict[str, Any]) -> Task:
        return await self._create(Task, data, "creating task")

    async def update_task(self, task_id: int, data: dict[str, Any]) -> Optional[Task]:
        return await self._update(Task, task_id, data, "updating task")

    async def delete_task(self, task_id: int) -> bool:
        return await self._delete(Task, task_id, "deleting task")
