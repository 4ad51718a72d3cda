"""Prayer time settings routes (one record per user)."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.deps import get_storage
from src.auth.security import require_user
from src.db.models import User
from src.schemas.schemas import (
    PrayerSettingsCreate,
    PrayerSettingsResponse,
    PrayerSettingsUpdate,
)
from src.services.storage import StorageService

router = APIRouter(prefix="/api/prayer-settings", tags=["Prayer Settings"])


def _not_found(user: User) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Prayer settings for user {user.id} not found",
    )


@router.get(
    "",
    response_model=PrayerSettingsResponse,
    summary="Get prayer settings",
)
async def get_prayer_settings(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    settings = await storage.get_prayer_settings(user.id)
    if settings is None:
        raise _not_found(user)
    return settings


@router.post(
    "",
    response_model=PrayerSettingsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create prayer settings",
    description="Fails with 409 if the user already has settings; use PATCH to change them.",
)
async def create_prayer_settings(
    payload: PrayerSettingsCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    if await storage.get_prayer_settings(user.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Prayer settings already exist",
        )
    return await storage.create_prayer_settings({"user_id": user.id, **payload.model_dump()})


@router.patch(
    "",
    response_model=PrayerSettingsResponse,
    summary="Update prayer settings",
)
async def update_prayer_settings(
    payload: PrayerSettingsUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    # adjustments is the only field an explicit null may clear
    values = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "adjustments"
    }
    settings = await storage.update_prayer_settings(user.id, values)
    if settings is None:
        raise _not_found(user)
    return settings


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete prayer settings",
)
async def delete_prayer_settings(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    if not await storage.delete_prayer_settings(user.id):
        raise _not_found(user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
