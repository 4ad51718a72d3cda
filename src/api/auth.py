"""Session authentication and profile routes."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.deps import get_storage
from src.auth.security import (
    clear_session_cookie,
    hash_password,
    require_user,
    set_session_cookie,
    verify_password,
)
from src.db.models import User
from src.schemas.schemas import LoginRequest, UserCreate, UserPreferences, UserResponse, UserUpdate
from src.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


def merge_preferences(stored: Optional[dict], update: UserPreferences) -> dict:
    """Merge a partial preferences update into the stored object.

    Only fields present in the update are changed; ``notifications`` is merged
    one level deeper.
    """
    merged = dict(stored or {})
    changes = update.model_dump(exclude_unset=True)
    notifications = changes.pop("notifications", None)
    merged.update(changes)
    if notifications is not None:
        merged["notifications"] = {**(merged.get("notifications") or {}), **notifications}
    return merged


def user_values(payload: UserCreate) -> dict[str, Any]:
    values = payload.model_dump(exclude={"password"}, exclude_none=True)
    values["password"] = hash_password(payload.password)
    return values


async def create_account(payload: UserCreate, storage: StorageService) -> User:
    if await storage.get_user_by_username(payload.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )
    user = await storage.create_user(user_values(payload))
    logger.info(f"Created user {user.id} ({user.username})")
    return user


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and start a session.",
)
async def register(
    payload: UserCreate,
    response: Response,
    storage: StorageService = Depends(get_storage),
):
    user = await create_account(payload, storage)
    set_session_cookie(response, user.id)
    return user


@router.post(
    "/login",
    response_model=UserResponse,
    summary="Log in",
    description="Verify credentials and start a session.",
)
async def login(
    payload: LoginRequest,
    response: Response,
    storage: StorageService = Depends(get_storage),
):
    user = await storage.get_user_by_username(payload.username)
    if user is None or not verify_password(payload.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    set_session_cookie(response, user.id)
    return user


@router.post(
    "/logout",
    summary="Log out",
    description="Clear the session cookie.",
)
async def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out"}


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Current user",
    description="Get the logged-in user's profile.",
)
async def current_user(user: User = Depends(require_user)):
    return user


async def _update_profile(payload: UserUpdate, user: User, storage: StorageService) -> User:
    values = payload.model_dump(exclude_unset=True, exclude={"preferences", "location"})
    # name is the only nullable top-level field
    values = {k: v for k, v in values.items() if v is not None or k == "name"}
    if payload.preferences is not None:
        values["preferences"] = merge_preferences(user.preferences, payload.preferences)
    if payload.location is not None:
        values["location"] = payload.location.model_dump(exclude_none=True)

    updated = await storage.update_user(user.id, values)
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user.id} not found",
        )
    return updated


@router.put(
    "/user/update",
    response_model=UserResponse,
    summary="Update profile",
    description="Update name, email, language, theme, location or preferences.",
)
async def update_profile(
    payload: UserUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await _update_profile(payload, user, storage)


@router.patch(
    "/user",
    response_model=UserResponse,
    summary="Patch profile",
    description="Same as PUT /api/user/update.",
)
async def patch_profile(
    payload: UserUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await _update_profile(payload, user, storage)
