"""Reading progress routes: the last position per content type."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from src.api.deps import get_storage
from src.auth.security import ensure_owner, require_user
from src.db.models import ContentType, User
from src.schemas.schemas import (
    ReadingProgressCreate,
    ReadingProgressResponse,
    ReadingProgressUpdate,
    validate_reference,
)
from src.services.storage import StorageService

router = APIRouter(prefix="/api/reading-progress", tags=["Reading Progress"])


@router.get(
    "",
    response_model=list[ReadingProgressResponse],
    summary="List reading progress",
)
async def list_reading_progress(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_reading_progress(user.id)


@router.get(
    "/{content_type}",
    response_model=ReadingProgressResponse,
    summary="Get reading progress for a content type",
)
async def get_reading_progress(
    content_type: ContentType,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    progress = await storage.get_reading_progress(user.id, content_type)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {content_type.value} reading progress",
        )
    return progress


@router.post(
    "",
    response_model=ReadingProgressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record reading progress",
    description="Creates the record for the type, or moves the existing one (200).",
)
async def save_reading_progress(
    payload: Annotated[ReadingProgressCreate, Body(discriminator="type")],
    response: Response,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    content_type = ContentType(payload.type)
    values = {
        "last_read": payload.last_read.model_dump(),
        "completion_percentage": payload.completion_percentage,
    }

    existing = await storage.get_reading_progress(user.id, content_type)
    if existing is not None:
        response.status_code = status.HTTP_200_OK
        return await storage.update_reading_progress(existing.id, values)
    return await storage.create_reading_progress({"user_id": user.id, "type": content_type, **values})


@router.patch(
    "/{progress_id}",
    response_model=ReadingProgressResponse,
    summary="Update reading progress",
)
async def update_reading_progress(
    progress_id: int,
    payload: ReadingProgressUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    progress = ensure_owner(
        await storage.get_reading_progress_by_id(progress_id), user, "Reading progress", progress_id
    )

    values = {}
    if payload.last_read is not None:
        try:
            values["last_read"] = validate_reference(progress.type, payload.last_read)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if payload.completion_percentage is not None:
        values["completion_percentage"] = payload.completion_percentage

    return await storage.update_reading_progress(progress_id, values)


@router.delete(
    "/{progress_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete reading progress",
)
async def delete_reading_progress(
    progress_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(
        await storage.get_reading_progress_by_id(progress_id), user, "Reading progress", progress_id
    )
    await storage.delete_reading_progress(progress_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
