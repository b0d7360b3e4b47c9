"""
Table store access behind a narrow repository interface.

Views only ever talk to a ``TableStore``; the backend behind it is either the
hosted REST query API (``RestTableStore``) or the same Postgres tables reached
directly through SQLAlchemy (``SqlTableStore``). ``cache.CachedTableStore``
wraps either one.
"""
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import Pavilion, Review
from schemas.pavilion import PavilionRead
from schemas.review import ReviewRead

logger = logging.getLogger("pavilions.store")


class StoreError(Exception):
    """Any failed read or write against the table store."""


class TableStore(Protocol):
    async def list_pavilions(self) -> list[PavilionRead]: ...

    async def get_pavilion(self, pavilion_id: int) -> PavilionRead | None: ...

    async def list_reviews(self, pavilion_id: int | None = None) -> list[ReviewRead]: ...

    async def insert_review(self, record: dict) -> ReviewRead: ...

    async def aclose(self) -> None: ...


class RestTableStore:
    """Query client for the hosted table store's REST API.

    ``base_url`` is the project endpoint; tables live under ``/rest/v1``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"apikey": api_key, "Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _get(self, table: str, params: dict) -> list[dict]:
        try:
            resp = await self._client.get(f"/{table}", params=params)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"read from {table} failed: {exc}") from exc

    async def list_pavilions(self) -> list[PavilionRead]:
        rows = await self._get("pavilions", {"select": "*", "order": "id.asc"})
        return _validate(PavilionRead, rows)

    async def get_pavilion(self, pavilion_id: int) -> PavilionRead | None:
        rows = await self._get(
            "pavilions", {"select": "*", "id": f"eq.{pavilion_id}", "limit": 1}
        )
        pavilions = _validate(PavilionRead, rows)
        return pavilions[0] if pavilions else None

    async def list_reviews(self, pavilion_id: int | None = None) -> list[ReviewRead]:
        params = {"select": "*", "order": "id.asc"}
        if pavilion_id is not None:
            params["pavilion_id"] = f"eq.{pavilion_id}"
            params["order"] = "created_at.desc,id.desc"
        rows = await self._get("reviews", params)
        return _validate(ReviewRead, rows)

    async def insert_review(self, record: dict) -> ReviewRead:
        try:
            resp = await self._client.post(
                "/reviews",
                json=record,
                headers={"Prefer": "return=representation"},
            )
            resp.raise_for_status()
            rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"insert into reviews failed: {exc}") from exc
        created = _validate(ReviewRead, rows if isinstance(rows, list) else [rows])
        if not created:
            raise StoreError("insert into reviews returned no row")
        return created[0]

    async def aclose(self) -> None:
        await self._client.aclose()


class SqlTableStore:
    """Direct access to the store's Postgres tables."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def list_pavilions(self) -> list[PavilionRead]:
        stmt = select(Pavilion).order_by(Pavilion.id.asc())
        try:
            async with self._sessionmaker() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"read from pavilions failed: {exc}") from exc
        return [PavilionRead.model_validate(p, from_attributes=True) for p in rows]

    async def get_pavilion(self, pavilion_id: int) -> PavilionRead | None:
        stmt = select(Pavilion).where(Pavilion.id == pavilion_id)
        try:
            async with self._sessionmaker() as db:
                pavilion = (await db.execute(stmt)).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"read from pavilions failed: {exc}") from exc
        if pavilion is None:
            return None
        return PavilionRead.model_validate(pavilion, from_attributes=True)

    async def list_reviews(self, pavilion_id: int | None = None) -> list[ReviewRead]:
        stmt = select(Review)
        if pavilion_id is not None:
            stmt = stmt.where(Review.pavilion_id == pavilion_id).order_by(
                Review.created_at.desc(), Review.id.desc()
            )
        else:
            stmt = stmt.order_by(Review.id.asc())
        try:
            async with self._sessionmaker() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"read from reviews failed: {exc}") from exc
        return [ReviewRead.model_validate(r, from_attributes=True) for r in rows]

    async def insert_review(self, record: dict) -> ReviewRead:
        new_review = Review(**record)
        try:
            async with self._sessionmaker() as db:
                db.add(new_review)
                await db.commit()
                await db.refresh(new_review)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"insert into reviews failed: {exc}") from exc
        return ReviewRead.model_validate(new_review, from_attributes=True)

    async def aclose(self) -> None:
        return None


def _validate(schema, rows) -> list:
    try:
        return [schema.model_validate(row) for row in rows]
    except (ValidationError, TypeError) as exc:
        logger.error("Unexpected %s payload from store: %s", schema.__name__, exc)
        raise StoreError(f"malformed {schema.__name__} row") from exc
