"""Generative-AI proxy routes.

All endpoints need a session and are rate-limited per user.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from src.api.deps import get_ai_service, get_quran_client, get_storage
from src.auth.security import require_user
from src.db.models import QuestionStatus, User
from src.middleware.rate_limit import rate_limit_ai
from src.schemas.schemas import (
    AskRequest,
    AskResponse,
    ExplainTermRequest,
    ExplainTermResponse,
    ExplainVerseRequest,
    ExplainVerseResponse,
    ScholarRequest,
    ScholarResponse,
    VerseText,
)
from src.services.ai import AIService
from src.services.errors import NoorError
from src.services.quran import QuranClient
from src.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["AI"])


@router.post(
    "/ask",
    response_model=AskResponse,
    summary="Ask a question",
    description="Stores the question, asks the model and stores the answer.",
)
@rate_limit_ai()
async def ask(
    request: Request,
    payload: AskRequest,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
):
    """
    Answer a question with the configured AI provider.

    The question is saved as pending first. If the provider fails it stays
    pending and the error is returned.
    """
    question = await storage.create_question(
        {"user_id": user.id, "question": payload.question, "status": QuestionStatus.PENDING}
    )

    try:
        answer = await ai.ask(payload.question)
    except NoorError as e:
        logger.warning(f"Question {question.id} left pending: {e.message}")
        raise

    question = await storage.update_question(
        question.id,
        {
            "answer": answer,
            "status": QuestionStatus.ANSWERED,
            "answered_at": datetime.now(timezone.utc),
        },
    )
    return AskResponse(
        question=question.question,
        answer=question.answer,
        question_id=question.id,
        status=question.status,
    )


@router.post(
    "/quran/explain",
    response_model=ExplainVerseResponse,
    summary="Explain a verse",
    description="Fetches the verse text and asks the model for a tafsir-style explanation.",
)
@rate_limit_ai()
async def explain_verse(
    request: Request,
    payload: ExplainVerseRequest,
    user: User = Depends(require_user),
    quran: QuranClient = Depends(get_quran_client),
    ai: AIService = Depends(get_ai_service),
):
    arabic = await quran.get_ayah_text(payload.surah, payload.ayah, "ar")
    translation = ""
    if payload.language != "ar":
        translation = await quran.get_ayah_text(payload.surah, payload.ayah, payload.language)

    explanation = await ai.explain_verse(payload.surah, payload.ayah, arabic, translation)
    return ExplainVerseResponse(
        verse=VerseText(surah=payload.surah, ayah=payload.ayah, arabic=arabic, translation=translation),
        explanation=explanation,
    )


@router.post(
    "/explain",
    response_model=ExplainTermResponse,
    summary="Explain a term",
)
@rate_limit_ai()
async def explain_term(
    request: Request,
    payload: ExplainTermRequest,
    user: User = Depends(require_user),
    ai: AIService = Depends(get_ai_service),
):
    return ExplainTermResponse(term=payload.term, explanation=await ai.explain_term(payload.term))


@router.post(
    "/scholar",
    response_model=ScholarResponse,
    summary="Scholar biography",
)
@rate_limit_ai()
async def scholar(
    request: Request,
    payload: ScholarRequest,
    user: User = Depends(require_user),
    ai: AIService = Depends(get_ai_service),
):
    return ScholarResponse(scholar_name=payload.name, biography=await ai.scholar_biography(payload.name))
