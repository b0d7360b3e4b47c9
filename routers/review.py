from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from dependencies import get_store
from schemas.review import ReviewRead
from store import StoreError, TableStore

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/", response_model=List[ReviewRead])
async def list_reviews(
    pavilion_id: int | None = Query(None, description="Filter by pavilion id"),
    store: TableStore = Depends(get_store),
):
    try:
        return await store.list_reviews(pavilion_id)
    except StoreError as exc:
        raise HTTPException(status_code=502, detail=f"Could not load reviews: {exc}")
