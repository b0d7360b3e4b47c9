import json
import logging
import os
from typing import Any, Awaitable, Callable

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from schemas.pavilion import PavilionRead
from schemas.review import ReviewRead
from settings import CACHE_TTL
from store import TableStore

Redis = aioredis.Redis
from_url = aioredis.from_url

logger = logging.getLogger("pavilions.cache")

_redis: Redis | None = None
DEFAULT_TTL = CACHE_TTL


def _build_redis_url() -> str:
    if raw := os.getenv("REDIS_URL"):
        return raw

    host = os.getenv("REDIS_HOST", "localhost")
    port = os.getenv("REDIS_PORT", "6379")
    db = os.getenv("REDIS_DB", "0")
    return f"redis://{host}:{port}/{db}"


REDIS_URL = _build_redis_url()


async def init_redis() -> Redis:
    """Create a single async Redis client for the process."""
    global _redis
    if _redis is None:
        _redis = from_url(
            REDIS_URL,
            decode_responses=True,
        )
    return _redis


async def close_redis():
    global _redis
    if _redis is not None:
        await _redis.close()
        _redis = None


def make_pavilions_key() -> str:
    return "pavilions:list"


def make_pavilion_key(pavilion_id: int) -> str:
    return f"pavilion:{pavilion_id}"


def make_reviews_key(pavilion_id: int | None = None) -> str:
    if pavilion_id is None:
        return "reviews:all"
    return f"pavilion:{pavilion_id}:reviews"


class CachedTableStore:
    """Read-through Redis cache in front of another ``TableStore``.

    Pavilions are never written by this application, so their keys only
    expire. Review lists are dropped whenever a review is inserted.
    """

    def __init__(self, inner: TableStore, r: Redis, ttl: int = DEFAULT_TTL):
        self._inner = inner
        self._r = r
        self._ttl = ttl

    async def _cached(
        self, key: str, load: Callable[[], Awaitable[Any]], dump: Callable[[Any], Any]
    ) -> Any:
        try:
            raw = await self._r.get(key)
        except RedisError as exc:
            logger.warning("Cache read for %s failed, using store: %s", key, exc)
            return dump(await load())
        if raw:
            return json.loads(raw)
        fresh = dump(await load())
        try:
            await self._r.set(key, json.dumps(fresh), ex=self._ttl)
        except RedisError as exc:
            logger.warning("Cache write for %s failed: %s", key, exc)
        return fresh

    async def list_pavilions(self) -> list[PavilionRead]:
        data = await self._cached(
            make_pavilions_key(),
            self._inner.list_pavilions,
            lambda rows: [p.model_dump(mode="json") for p in rows],
        )
        return [PavilionRead.model_validate(p) for p in data]

    async def get_pavilion(self, pavilion_id: int) -> PavilionRead | None:
        # a missing pavilion is not cached so that new rows show up immediately
        key = make_pavilion_key(pavilion_id)
        try:
            raw = await self._r.get(key)
        except RedisError as exc:
            logger.warning("Cache read for %s failed, using store: %s", key, exc)
            return await self._inner.get_pavilion(pavilion_id)
        if raw:
            return PavilionRead.model_validate(json.loads(raw))
        pavilion = await self._inner.get_pavilion(pavilion_id)
        if pavilion is not None:
            try:
                await self._r.set(key, pavilion.model_dump_json(), ex=self._ttl)
            except RedisError as exc:
                logger.warning("Cache write for %s failed: %s", key, exc)
        return pavilion

    async def list_reviews(self, pavilion_id: int | None = None) -> list[ReviewRead]:
        data = await self._cached(
            make_reviews_key(pavilion_id),
            lambda: self._inner.list_reviews(pavilion_id),
            lambda rows: [r.model_dump(mode="json") for r in rows],
        )
        return [ReviewRead.model_validate(r) for r in data]

    async def insert_review(self, record: dict) -> ReviewRead:
        created = await self._inner.insert_review(record)
        await invalidate_reviews(created.pavilion_id, self._r)
        return created

    async def aclose(self) -> None:
        await self._inner.aclose()


async def invalidate_reviews(pavilion_id: int, r: Redis | None = None):
    r = r or await init_redis()
    # In cluster mode, delete keys individually to avoid CROSSSLOT on multi-key DEL.
    for key in (make_reviews_key(), make_reviews_key(pavilion_id)):
        try:
            await r.delete(key)
        except RedisError as exc:
            logger.warning("Cache invalidation for %s failed: %s", key, exc)
