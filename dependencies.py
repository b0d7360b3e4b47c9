import asyncio
import logging

from fastapi import FastAPI, HTTPException, Query, Request, status

import settings
from cache import CachedTableStore, init_redis
from schemas.catalog import Order, Presentation
from store import RestTableStore, SqlTableStore, TableStore

logger = logging.getLogger("pavilions.dependencies")


async def build_store() -> TableStore:
    if settings.STORE_BACKEND == "sql":
        from database import AsyncSessionLocal

        store: TableStore = SqlTableStore(AsyncSessionLocal)
    elif settings.STORE_BACKEND == "rest":
        store = RestTableStore(
            settings.STORE_URL, settings.STORE_KEY, timeout=settings.STORE_TIMEOUT
        )
    else:
        raise RuntimeError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'")

    if settings.CACHE_ENABLED:
        store = CachedTableStore(store, await init_redis(), ttl=settings.CACHE_TTL)
    logger.info(
        "Using %s table store (cache %s)",
        settings.STORE_BACKEND,
        "on" if settings.CACHE_ENABLED else "off",
    )
    return store


async def ensure_store(app: FastAPI) -> TableStore:
    """Build the app-scoped table store once, even under concurrent first use."""
    store = getattr(app.state, "store", None)
    if store is not None:
        return store
    lock = getattr(app.state, "store_lock", None)
    if lock is None:
        lock = app.state.store_lock = asyncio.Lock()
    async with lock:
        store = getattr(app.state, "store", None)
        if store is None:
            store = await build_store()
            app.state.store = store
    return store


async def get_store(request: Request) -> TableStore:
    """FastAPI dependency: return the app-scoped table store."""
    return await ensure_store(request.app)


def parse_presentation(
    presentation: str = Query("list", description="'list' or 'block'")
) -> Presentation:
    try:
        return Presentation(presentation.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid presentation '{presentation}', expected 'list' or 'block'",
        )


def parse_order(
    order: str = Query("default", description="'default' or 'rating'")
) -> Order:
    try:
        return Order(order.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid order '{order}', expected 'default' or 'rating'",
        )
