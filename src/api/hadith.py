"""Hadith content routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import get_hadith_service
from src.schemas.schemas import Hadith, HadithBook, HadithChapter, HadithCollection, HadithPage
from src.services.hadith import HadithService

router = APIRouter(prefix="/api/hadith", tags=["Hadith"])


def _require_collection(service: HadithService, collection: str) -> None:
    if service.get_collection(collection) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Collection {collection} not found",
        )


@router.get("/collections", response_model=list[HadithCollection], summary="List collections")
async def list_collections(service: HadithService = Depends(get_hadith_service)):
    return service.list_collections()


@router.get(
    "/collections/{collection}/books",
    response_model=list[HadithBook],
    summary="List books of a collection",
)
async def list_books(collection: str, service: HadithService = Depends(get_hadith_service)):
    _require_collection(service, collection)
    return service.list_books(collection)


@router.get(
    "/collections/{collection}/books/{book_number}/chapters",
    response_model=list[HadithChapter],
    summary="List chapters of a book",
)
async def list_chapters(
    collection: str,
    book_number: str,
    service: HadithService = Depends(get_hadith_service),
):
    _require_collection(service, collection)
    return service.list_chapters(collection, book_number)


@router.get(
    "/collections/{collection}/hadiths",
    response_model=HadithPage,
    summary="List hadiths",
)
async def list_hadiths(
    collection: str,
    book: Optional[str] = Query(None, max_length=20),
    chapter: Optional[int] = Query(None, ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: HadithService = Depends(get_hadith_service),
):
    _require_collection(service, collection)
    return await service.list_hadiths(collection, book, chapter, page, limit)


@router.get("/search", response_model=HadithPage, summary="Search hadiths")
async def search_hadiths(
    q: str = Query(..., min_length=1, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: HadithService = Depends(get_hadith_service),
):
    return await service.search(q, page, limit)


@router.get("/{collection}/{number}", response_model=Hadith, summary="Get a hadith")
async def get_hadith(
    collection: str,
    number: int,
    service: HadithService = Depends(get_hadith_service),
):
    _require_collection(service, collection)
    hadith = await service.get_hadith(collection, number)
    if hadith is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Hadith {collection} {number} not found",
        )
    return hadith
