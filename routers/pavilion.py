import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from dependencies import get_store
from schemas.pavilion import PavilionDetailRead, SelectionRead
from schemas.review import ReviewCreate, ReviewRead
from store import StoreError, TableStore
from views import (
    NOT_FOUND_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    CatalogView,
    DetailView,
    ReviewForm,
    ViewState,
)

logger = logging.getLogger("pavilions.routers.pavilion")

router = APIRouter(prefix="/pavilion", tags=["pavilions"])


async def _load_detail(pavilion_id: int, store: TableStore) -> DetailView:
    view = DetailView(store, pavilion_id)
    await view.load()
    if view.state is ViewState.not_found:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return view


@router.get("/{pavilion_id}", response_model=PavilionDetailRead)
async def get_pavilion(
    pavilion_id: int,
    store: TableStore = Depends(get_store),
):
    view = await _load_detail(pavilion_id, store)
    return view.render()


@router.get("/{pavilion_id}/reviews", response_model=List[ReviewRead])
async def get_reviews(
    pavilion_id: int,
    store: TableStore = Depends(get_store),
):
    view = await _load_detail(pavilion_id, store)
    return view.reviews


@router.get("/{pavilion_id}/selection", response_model=SelectionRead)
async def get_selection(
    pavilion_id: int,
    store: TableStore = Depends(get_store),
):
    view = CatalogView(store)
    await view.load()
    selection = view.select(pavilion_id)
    if selection is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return selection


@router.post("/{pavilion_id}/reviews", response_model=ReviewRead)
async def create_review(
    pavilion_id: int,
    review: ReviewCreate,
    store: TableStore = Depends(get_store),
):
    try:
        pavilion = await store.get_pavilion(pavilion_id)
    except StoreError as exc:
        logger.error("Could not check pavilion %s before submission: %s", pavilion_id, exc)
        raise HTTPException(status_code=502, detail=SUBMIT_FAILED_MESSAGE)
    if pavilion is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)

    form = ReviewForm(store, pavilion_id)
    form.name = review.name or ""
    form.comment = review.comment
    form.again = review.again
    created = await form.submit()
    if created is None:
        raise HTTPException(status_code=502, detail=form.error or SUBMIT_FAILED_MESSAGE)
    return created
