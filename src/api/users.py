"""User account routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.auth import create_account
from src.api.deps import get_storage
from src.auth.security import require_user
from src.db.models import User
from src.schemas.schemas import UserCreate, UserResponse
from src.services.storage import StorageService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="Create an account without starting a session.",
)
async def create_user(
    payload: UserCreate,
    storage: StorageService = Depends(get_storage),
):
    return await create_account(payload, storage)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    description="Users can only read their own account.",
)
async def get_user(
    user_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    record = await storage.get_user(user_id) if user_id == user.id else None
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return record
