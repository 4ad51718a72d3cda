"""Bookmark routes."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from src.api.deps import get_storage
from src.auth.security import ensure_owner, require_user
from src.db.models import ContentType, User
from src.schemas.schemas import (
    BookmarkCreate,
    BookmarkResponse,
    BookmarkUpdate,
    validate_reference,
)
from src.services.storage import StorageService

router = APIRouter(prefix="/api/bookmarks", tags=["Bookmarks"])


@router.get(
    "",
    response_model=list[BookmarkResponse],
    summary="List bookmarks",
)
async def list_bookmarks(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_bookmarks(user.id)


@router.get(
    "/type/{content_type}",
    response_model=list[BookmarkResponse],
    summary="List bookmarks by type",
)
async def list_bookmarks_by_type(
    content_type: ContentType,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_bookmarks_by_type(user.id, content_type)


@router.post(
    "",
    response_model=BookmarkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bookmark",
    description="The reference shape must match the type: quran -> {surah, ayah}, hadith -> {collection, number}.",
)
async def create_bookmark(
    payload: Annotated[BookmarkCreate, Body(discriminator="type")],
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.create_bookmark(
        {
            "user_id": user.id,
            "type": ContentType(payload.type),
            "reference": payload.reference.model_dump(),
            "note": payload.note,
        }
    )


@router.get(
    "/{bookmark_id}",
    response_model=BookmarkResponse,
    summary="Get a bookmark",
)
async def get_bookmark(
    bookmark_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    bookmark = await storage.get_bookmark(bookmark_id)
    return ensure_owner(bookmark, user, "Bookmark", bookmark_id)


@router.patch(
    "/{bookmark_id}",
    response_model=BookmarkResponse,
    summary="Update a bookmark",
    description="Changing the type requires a reference of the new shape.",
)
async def update_bookmark(
    bookmark_id: int,
    payload: BookmarkUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    bookmark = ensure_owner(await storage.get_bookmark(bookmark_id), user, "Bookmark", bookmark_id)

    values = payload.model_dump(exclude_unset=True, exclude={"reference"})
    if values.get("type") is None:
        values.pop("type", None)
    content_type = values.get("type", bookmark.type)
    reference = payload.reference if payload.reference is not None else bookmark.reference
    try:
        values["reference"] = validate_reference(content_type, reference)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return await storage.update_bookmark(bookmark_id, values)


@router.delete(
    "/{bookmark_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a bookmark",
)
async def delete_bookmark(
    bookmark_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_bookmark(bookmark_id), user, "Bookmark", bookmark_id)
    await storage.delete_bookmark(bookmark_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
