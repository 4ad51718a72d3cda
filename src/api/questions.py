"""Question routes.

A question is either pending or answered. Supplying an answer moves it to
answered; answered questions never go back to pending.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.deps import get_storage
from src.auth.security import ensure_owner, require_user
from src.db.models import QuestionStatus, User
from src.schemas.schemas import QuestionCreate, QuestionResponse, QuestionUpdate
from src.services.storage import StorageService

router = APIRouter(prefix="/api/questions", tags=["Questions"])


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get(
    "",
    response_model=list[QuestionResponse],
    summary="List questions",
    description="All of the current user's questions, newest first.",
)
async def list_questions(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_questions(user.id)


@router.get(
    "/answered",
    response_model=list[QuestionResponse],
    summary="List answered questions",
)
async def list_answered_questions(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_answered_questions(user.id)


@router.get(
    "/pending",
    response_model=list[QuestionResponse],
    summary="List pending questions",
)
async def list_pending_questions(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_pending_questions(user.id)


@router.post(
    "",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a question",
    description="Stored as answered when an answer is supplied, otherwise pending.",
)
async def create_question(
    payload: QuestionCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    if payload.status == QuestionStatus.ANSWERED and not payload.answer:
        raise _bad_request("An answered question needs an answer")

    values = {"user_id": user.id, "question": payload.question, "status": QuestionStatus.PENDING}
    if payload.answer:
        values.update(
            answer=payload.answer,
            status=QuestionStatus.ANSWERED,
            answered_at=datetime.now(timezone.utc),
        )
    return await storage.create_question(values)


@router.get(
    "/{question_id}",
    response_model=QuestionResponse,
    summary="Get a question",
)
async def get_question(
    question_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return ensure_owner(await storage.get_question(question_id), user, "Question", question_id)


@router.patch(
    "/{question_id}",
    response_model=QuestionResponse,
    summary="Update a question",
    description="Supplying an answer moves the question from pending to answered.",
)
async def update_question(
    question_id: int,
    payload: QuestionUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    question = ensure_owner(await storage.get_question(question_id), user, "Question", question_id)

    if question.status == QuestionStatus.ANSWERED and payload.status == QuestionStatus.PENDING:
        raise _bad_request("An answered question cannot return to pending")

    values = {}
    if payload.question is not None:
        values["question"] = payload.question
    if payload.answer:
        values["answer"] = payload.answer
        if question.status == QuestionStatus.PENDING:
            values["status"] = QuestionStatus.ANSWERED
            values["answered_at"] = datetime.now(timezone.utc)
    elif payload.status == QuestionStatus.ANSWERED and question.status == QuestionStatus.PENDING:
        raise _bad_request("An answered question needs an answer")

    return await storage.update_question(question_id, values)


@router.delete(
    "/{question_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a question",
)
async def delete_question(
    question_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_question(question_id), user, "Question", question_id)
    await storage.delete_question(question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
