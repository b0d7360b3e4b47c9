import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import settings
from cache import close_redis
from dependencies import ensure_store
from routers import catalog, pavilion, review


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the ``pavilions`` logger that every module logs under."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("pavilions")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_store(app)
    logger.info("Pavilion API started")
    yield
    store = getattr(app.state, "store", None)
    if store is not None:
        await store.aclose()
    await close_redis()
    logger.info("Pavilion API stopped")


app = FastAPI(title="Pavilion Reviews", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog.router)
app.include_router(pavilion.router)
app.include_router(review.router)
