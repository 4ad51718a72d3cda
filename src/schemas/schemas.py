"""Pydantic schemas for request/response validation.

All schemas speak camelCase on the wire and snake_case in Python.
"""

import datetime as dt
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from src.db.models import (
    ClientStatus,
    ContentType,
    MeetingStatus,
    QuestionStatus,
    TaskPriority,
)

# Aladhan method ids, keyed by the names stored in PrayerSettings
CALCULATION_METHODS = {
    "Jafari": 0,
    "Karachi": 1,
    "ISNA": 2,
    "MWL": 3,
    "Makkah": 4,
    "Egypt": 5,
    "Tehran": 7,
    "Gulf": 8,
    "Kuwait": 9,
    "Qatar": 10,
    "Singapore": 11,
    "France": 12,
    "Turkey": 13,
    "Russia": 14,
    "Dubai": 16,
}
PRAYER_NAMES = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")


def lower_email(value: str | None) -> str | None:
    """Email addresses are stored lower-cased."""
    return value.lower() if value is not None else None


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============== Content References ==============


class QuranReference(CamelModel):
    """Points at a verse: {surah, ayah}."""

    model_config = ConfigDict(extra="forbid")

    surah: int = Field(..., ge=1, le=114)
    ayah: int = Field(..., ge=1, le=286)


class HadithReference(CamelModel):
    """Points at a hadith: {collection, number}."""

    model_config = ConfigDict(extra="forbid")

    collection: str = Field(..., min_length=1, max_length=50)
    number: str = Field(..., min_length=1, max_length=20)

    @field_validator("number", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return str(v) if isinstance(v, int) else v


Reference = Union[QuranReference, HadithReference]

REFERENCE_MODELS: dict[ContentType, type[CamelModel]] = {
    ContentType.QURAN: QuranReference,
    ContentType.HADITH: HadithReference,
}


def validate_reference(content_type: ContentType, value: dict | CamelModel) -> dict:
    """Validate a reference against the shape required by its content type.

    Raises ValueError when the reference does not fit the type.
    """
    if isinstance(value, CamelModel):
        value = value.model_dump()
    model = REFERENCE_MODELS[ContentType(content_type)]
    try:
        return model.model_validate(value).model_dump()
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValueError(
            f"Reference does not match type '{ContentType(content_type).value}' ({fields})"
        ) from None


# ============== User Schemas ==============


class NotificationPreferences(CamelModel):
    daily_reminder: Optional[bool] = None
    prayer_alerts: Optional[bool] = None
    weekly_digest: Optional[bool] = None


class UserPreferences(CamelModel):
    """Free-form display preferences, stored as one nested object."""

    avatar: Optional[str] = None
    arabic_script: Optional[str] = None
    translation: Optional[str] = None
    reciter: Optional[str] = None
    notifications: Optional[NotificationPreferences] = None


class UserLocation(CamelModel):
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class UserCreate(CamelModel):
    """Registration / account creation payload."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8)
    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)
    location: Optional[UserLocation] = None
    language: str = Field("en", max_length=10)
    theme: str = Field("light", max_length=20)
    preferences: Optional[UserPreferences] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return lower_email(v)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, v: str) -> str:
        # bcrypt hard limit
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v


class UserUpdate(CamelModel):
    """Profile update. Preferences are merged into the stored object."""

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    language: Optional[str] = Field(None, max_length=10)
    theme: Optional[str] = Field(None, max_length=20)
    location: Optional[UserLocation] = None
    preferences: Optional[UserPreferences] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return lower_email(v)


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    location: Optional[UserLocation] = None
    language: Optional[str] = "en"
    theme: Optional[str] = "light"
    preferences: Optional[UserPreferences] = None
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# ============== Bookmark Schemas ==============


class QuranBookmarkCreate(CamelModel):
    type: Literal["quran"]
    reference: QuranReference
    note: Optional[str] = None


class HadithBookmarkCreate(CamelModel):
    type: Literal["hadith"]
    reference: HadithReference
    note: Optional[str] = None


# Tagged on "type"; routes parse it with Body(discriminator="type")
BookmarkCreate = Union[QuranBookmarkCreate, HadithBookmarkCreate]


class BookmarkUpdate(CamelModel):
    """Partial bookmark update; a new type requires a matching reference."""

    type: Optional[ContentType] = None
    reference: Optional[Reference] = None
    note: Optional[str] = None


class BookmarkResponse(CamelModel):
    id: int
    user_id: int
    type: ContentType
    reference: dict
    note: Optional[str] = None
    created_at: Optional[datetime] = None


# ============== Prayer Settings Schemas ==============

PrayerName = Literal["fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha"]
Adjustments = dict[PrayerName, Annotated[int, Field(ge=-60, le=60)]]


class PrayerSettingsCreate(CamelModel):
    calculation_method: str = "MWL"
    asr_method: Literal["Standard", "Hanafi"] = "Standard"
    adjustments: Optional[Adjustments] = None
    notifications_enabled: bool = True

    @field_validator("calculation_method")
    @classmethod
    def check_method(cls, v: str) -> str:
        if v not in CALCULATION_METHODS:
            raise ValueError(f"Unknown calculation method: {v}")
        return v


class PrayerSettingsUpdate(CamelModel):
    calculation_method: Optional[str] = None
    asr_method: Optional[Literal["Standard", "Hanafi"]] = None
    adjustments: Optional[Adjustments] = None
    notifications_enabled: Optional[bool] = None

    @field_validator("calculation_method")
    @classmethod
    def check_method(cls, v: str | None) -> str | None:
        if v is not None and v not in CALCULATION_METHODS:
            raise ValueError(f"Unknown calculation method: {v}")
        return v


class PrayerSettingsResponse(CamelModel):
    id: int
    user_id: int
    calculation_method: str
    asr_method: str
    adjustments: Optional[dict] = None
    notifications_enabled: bool


# ============== Reading Progress Schemas ==============


class QuranProgressCreate(CamelModel):
    type: Literal["quran"]
    last_read: QuranReference
    completion_percentage: int = Field(0, ge=0, le=100)


class HadithProgressCreate(CamelModel):
    type: Literal["hadith"]
    last_read: HadithReference
    completion_percentage: int = Field(0, ge=0, le=100)


ReadingProgressCreate = Union[QuranProgressCreate, HadithProgressCreate]


class ReadingProgressUpdate(CamelModel):
    last_read: Optional[Reference] = None
    completion_percentage: Optional[int] = Field(None, ge=0, le=100)


class ReadingProgressResponse(CamelModel):
    id: int
    user_id: int
    type: ContentType
    last_read: dict
    completion_percentage: int
    updated_at: Optional[datetime] = None


# ============== Question Schemas ==============


class QuestionCreate(CamelModel):
    question: str = Field(..., min_length=1, max_length=5000)
    answer: Optional[str] = None
    status: Optional[QuestionStatus] = None


class QuestionUpdate(CamelModel):
    question: Optional[str] = Field(None, min_length=1, max_length=5000)
    answer: Optional[str] = None
    status: Optional[QuestionStatus] = None


class QuestionResponse(CamelModel):
    id: int
    user_id: int
    question: str
    answer: Optional[str] = None
    status: QuestionStatus
    created_at: Optional[datetime] = None
    answered_at: Optional[datetime] = None


# ============== Search History Schemas ==============


class SearchHistoryCreate(CamelModel):
    query: str = Field(..., min_length=1, max_length=500)


class SearchHistoryResponse(CamelModel):
    id: int
    user_id: int
    query: str
    created_at: Optional[datetime] = None


# ============== CRM Schemas ==============


class ClientCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    status: ClientStatus = ClientStatus.LEAD
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return lower_email(v)


class ClientUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    status: Optional[ClientStatus] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return lower_email(v)


class ClientResponse(CamelModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    status: ClientStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class MeetingCreate(CamelModel):
    client_id: int
    title: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    date: dt.date
    start_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    duration: str = Field("1 hour", max_length=50)
    details: Optional[str] = None
    status: MeetingStatus = MeetingStatus.SCHEDULED
    send_reminder: bool = False
    reminder_time: Optional[str] = Field(None, max_length=50)


class MeetingUpdate(CamelModel):
    client_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    duration: Optional[str] = Field(None, max_length=50)
    details: Optional[str] = None
    status: Optional[MeetingStatus] = None
    send_reminder: Optional[bool] = None
    reminder_time: Optional[str] = Field(None, max_length=50)


class MeetingResponse(CamelModel):
    id: int
    user_id: int
    client_id: int
    title: str
    location: Optional[str] = None
    date: dt.date
    start_time: str
    duration: str
    details: Optional[str] = None
    status: MeetingStatus
    send_reminder: bool
    reminder_time: Optional[str] = None
    created_at: Optional[datetime] = None


class TaskCreate(CamelModel):
    client_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255)
    due_date: Optional[dt.date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    completed: bool = False


class TaskUpdate(CamelModel):
    client_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    due_date: Optional[dt.date] = None
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None


class TaskResponse(CamelModel):
    id: int
    user_id: int
    client_id: Optional[int] = None
    title: str
    due_date: Optional[dt.date] = None
    priority: TaskPriority
    completed: bool
    created_at: Optional[datetime] = None


class ReportSummary(CamelModel):
    """Aggregates behind the CRM reports page."""

    from_date: Optional[dt.date] = None
    to_date: Optional[dt.date] = None
    total_clients: int
    total_meetings: int
    total_tasks: int
    clients_by_status: dict[str, int]
    meetings_by_status: dict[str, int]
    meetings_by_weekday: dict[str, int]
    tasks_by_priority: dict[str, int]
    tasks_completed: int
    tasks_pending: int


# ============== AI Proxy Schemas ==============


class AskRequest(CamelModel):
    question: str = Field(..., min_length=1, max_length=5000)


class AskResponse(CamelModel):
    question: str
    answer: str
    question_id: int
    status: QuestionStatus


class ExplainVerseRequest(CamelModel):
    surah: int = Field(..., ge=1, le=114)
    ayah: int = Field(..., ge=1, le=286)
    language: str = Field("en", max_length=10)


class VerseText(CamelModel):
    surah: int
    ayah: int
    arabic: str
    translation: str


class ExplainVerseResponse(CamelModel):
    verse: VerseText
    explanation: str


class ExplainTermRequest(CamelModel):
    term: str = Field(..., min_length=1, max_length=500)


class ExplainTermResponse(CamelModel):
    term: str
    explanation: str


class ScholarRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)


class ScholarResponse(CamelModel):
    scholar_name: str
    biography: str


# ============== Content Schemas ==============


class SurahInfo(CamelModel):
    number: int
    name: str
    english_name: str
    english_name_translation: str
    revelation_type: str
    number_of_ayahs: int


class AyahText(CamelModel):
    number: int
    number_in_surah: int
    text: str
    juz: Optional[int] = None
    page: Optional[int] = None
    audio: Optional[str] = None


class AyahWithTranslations(CamelModel):
    surah: int
    ayah: int
    arabic: str
    translations: dict[str, str]


class Reciter(CamelModel):
    name: str
    identifier: str


class QuranSearchMatch(CamelModel):
    surah: int
    ayah: int
    surah_name: str
    text: str


class HadithGrade(CamelModel):
    grade: str
    graded_by: str


class HadithCollection(CamelModel):
    name: str
    collection: str
    has_chapters: bool
    number_of_hadith: int


class HadithBook(CamelModel):
    name: str
    collection: str
    book_number: str
    number_of_hadith: int


class HadithChapter(CamelModel):
    chapter_id: int
    book_number: str
    chapter_number: int
    chapter_title: str
    hadith_start_number: int
    hadith_end_number: int


class Hadith(CamelModel):
    collection: str
    book_number: str
    chapter_number: int
    hadith_number: int
    text: str
    grades: list[HadithGrade] = []
    translations: dict[str, str] = {}


class HadithPage(CamelModel):
    hadiths: list[Hadith]
    total: int
    page: int
    limit: int


class QiblaResponse(CamelModel):
    latitude: float
    longitude: float
    direction: float  # degrees clockwise from true north
    distance_km: float


class GeocodeResponse(CamelModel):
    query: str
    latitude: float
    longitude: float
    display_name: Optional[str] = None


class PrayerTimesResponse(CamelModel):
    date: dt.date
    latitude: float
    longitude: float
    calculation_method: str
    asr_method: str
    timings: dict[str, str]  # prayer -> "HH:MM"
    current_prayer: str
    next_prayer: str
    next_prayer_time: datetime


class IslamicEvent(CamelModel):
    name: str
    description: str
    type: Literal["holiday", "observance"]
    hijri_day: int
    hijri_month: int
    gregorian_date: Optional[dt.date] = None


class HijriDateResponse(CamelModel):
    gregorian: dt.date
    hijri_year: int
    hijri_month: int
    hijri_day: int
    month_name: str
    formatted: str
    events: list[IslamicEvent] = []


# ============== Health & Misc Schemas ==============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    rate_limit_storage: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: Optional[object] = None


