"""Quran content routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from src.api.deps import get_quran_client, get_storage
from src.auth.security import get_current_user_optional
from src.db.models import User
from src.schemas.schemas import (
    AyahText,
    AyahWithTranslations,
    QuranSearchMatch,
    Reciter,
    SurahInfo,
)
from src.services.quran import DEFAULT_RECITER, QuranClient
from src.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quran", tags=["Quran"])

SurahNumber = Path(..., ge=1, le=114)
AyahNumber = Path(..., ge=1, le=286)


@router.get("/surahs", response_model=list[SurahInfo], summary="List surahs")
async def list_surahs(quran: QuranClient = Depends(get_quran_client)):
    return await quran.list_surahs()


@router.get("/surahs/{surah}", response_model=list[AyahText], summary="Surah text")
async def get_surah(
    surah: int = SurahNumber,
    edition: str = Query("quran-uthmani", max_length=50),
    quran: QuranClient = Depends(get_quran_client),
):
    return await quran.get_surah(surah, edition)


@router.get(
    "/surahs/{surah}/translation",
    response_model=list[AyahText],
    summary="Surah translation",
    description="Supported languages: en, ur, hi. Others fall back to English.",
)
async def get_surah_translation(
    surah: int = SurahNumber,
    language: str = Query("en", max_length=10),
    quran: QuranClient = Depends(get_quran_client),
):
    return await quran.get_surah_translation(surah, language)


@router.get(
    "/surahs/{surah}/recitation",
    response_model=list[str],
    summary="Surah recitation audio",
)
async def get_surah_recitation(
    surah: int = SurahNumber,
    reciter: str = Query(DEFAULT_RECITER, max_length=50),
    quran: QuranClient = Depends(get_quran_client),
):
    return await quran.get_surah_recitation(surah, reciter)


@router.get("/reciters", response_model=list[Reciter], summary="List reciters")
async def list_reciters(quran: QuranClient = Depends(get_quran_client)):
    return await quran.list_reciters()


@router.get(
    "/search",
    response_model=list[QuranSearchMatch],
    summary="Search the Quran",
    description="Searches a translation. Logged-in users get the query added to their search history.",
)
async def search_quran(
    q: str = Query(..., min_length=1, max_length=500),
    language: str = Query("en", max_length=10),
    user: Optional[User] = Depends(get_current_user_optional),
    quran: QuranClient = Depends(get_quran_client),
    storage: StorageService = Depends(get_storage),
):
    matches = await quran.search(q, language)
    if user is not None:
        await storage.create_search_history_item({"user_id": user.id, "query": q})
    return matches


@router.get(
    "/ayah/{surah}/{ayah}",
    response_model=AyahWithTranslations,
    summary="Ayah with translations",
)
async def get_ayah(
    surah: int = SurahNumber,
    ayah: int = AyahNumber,
    quran: QuranClient = Depends(get_quran_client),
):
    return await quran.get_ayah_with_translations(surah, ayah)


@router.get("/ayah/{surah}/{ayah}/audio", summary="Ayah audio URL")
async def get_ayah_audio(
    surah: int = SurahNumber,
    ayah: int = AyahNumber,
    reciter: str = Query(DEFAULT_RECITER, max_length=50),
    quran: QuranClient = Depends(get_quran_client),
):
    return {"surah": surah, "ayah": ayah, "reciter": reciter, "url": await quran.get_ayah_audio_url(surah, ayah, reciter)}
