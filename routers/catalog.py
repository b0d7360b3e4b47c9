from fastapi import APIRouter, Depends
from dependencies import get_store, parse_order, parse_presentation
from schemas.catalog import CatalogRead, Order, Presentation
from store import TableStore
from views import CatalogView

router = APIRouter(tags=["catalog"])


@router.get("/", response_model=CatalogRead)
async def get_catalog(
    presentation: Presentation = Depends(parse_presentation),
    order: Order = Depends(parse_order),
    store: TableStore = Depends(get_store),
):
    view = CatalogView(store, presentation=presentation, order=order)
    await view.load()
    return view.render()
