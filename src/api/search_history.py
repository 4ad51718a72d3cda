"""Search history routes."""

from fastapi import APIRouter, Depends, Response, status

from src.api.deps import get_storage
from src.auth.security import require_user
from src.db.models import User
from src.schemas.schemas import SearchHistoryCreate, SearchHistoryResponse
from src.services.storage import StorageService

router = APIRouter(prefix="/api/search-history", tags=["Search History"])


@router.get(
    "",
    response_model=list[SearchHistoryResponse],
    summary="List search history",
    description="Most recent searches first.",
)
async def list_search_history(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_search_history(user.id)


@router.post(
    "",
    response_model=SearchHistoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a search",
)
async def add_search_history_item(
    payload: SearchHistoryCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.create_search_history_item({"user_id": user.id, "query": payload.query})


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear search history",
)
async def clear_search_history(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    await storage.clear_search_history(user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
