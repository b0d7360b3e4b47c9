import asyncio
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from schemas.pavilion import PavilionRead
from schemas.review import ReviewRead
from store import StoreError

BASE_TIME = datetime(2025, 4, 13, 9, 0, tzinfo=timezone.utc)


def make_pavilion(pavilion_id: int, name: str | None = None) -> PavilionRead:
    return PavilionRead(
        id=pavilion_id,
        name=name or f"Pavilion {pavilion_id}",
        description=f"Description of pavilion {pavilion_id}",
        image_url=f"/pavilion-img/{pavilion_id}.png",
    )


def make_review(
    review_id: int, pavilion_id: int, again: bool | None = True, name: str | None = "Taro"
) -> ReviewRead:
    return ReviewRead(
        id=review_id,
        pavilion_id=pavilion_id,
        name=name,
        comment=f"comment {review_id}",
        again=again,
        created_at=BASE_TIME + timedelta(minutes=review_id),
    )


class FakeStore:
    """In-memory TableStore that counts calls and can be told to fail."""

    def __init__(self, pavilions=None, reviews=None):
        self.pavilions = list(pavilions or [])
        self.reviews = list(reviews or [])
        self.calls = Counter()
        self.inserted: list[dict] = []
        self.fail_pavilions = False
        self.fail_reviews = False
        self.fail_insert = False
        self.insert_gate: asyncio.Event | None = None

    async def list_pavilions(self):
        self.calls["list_pavilions"] += 1
        if self.fail_pavilions:
            raise StoreError("pavilions unavailable")
        return sorted(self.pavilions, key=lambda p: p.id)

    async def get_pavilion(self, pavilion_id):
        self.calls["get_pavilion"] += 1
        if self.fail_pavilions:
            raise StoreError("pavilions unavailable")
        return next((p for p in self.pavilions if p.id == pavilion_id), None)

    async def list_reviews(self, pavilion_id=None):
        self.calls["list_reviews"] += 1
        if self.fail_reviews:
            raise StoreError("reviews unavailable")
        if pavilion_id is None:
            return sorted(self.reviews, key=lambda r: r.id)
        matching = [r for r in self.reviews if r.pavilion_id == pavilion_id]
        return sorted(matching, key=lambda r: (r.created_at, r.id), reverse=True)

    async def insert_review(self, record):
        self.calls["insert_review"] += 1
        if self.insert_gate is not None:
            await self.insert_gate.wait()
        if self.fail_insert:
            raise StoreError("insert rejected")
        self.inserted.append(record)
        next_id = max((r.id for r in self.reviews), default=0) + 1
        review = ReviewRead(
            id=next_id,
            created_at=BASE_TIME + timedelta(days=1, minutes=next_id),
            **record,
        )
        self.reviews.append(review)
        return review

    async def aclose(self):
        return None


@pytest.fixture
def pavilions():
    return [make_pavilion(1, "日本館"), make_pavilion(2, "アメリカパビリオン"), make_pavilion(3)]


@pytest.fixture
def reviews():
    return [
        make_review(1, 1, again=True),
        make_review(2, 1, again=False),
        make_review(3, 2, again=True),
        make_review(4, 2, again=True),
    ]


@pytest.fixture
def store(pavilions, reviews):
    return FakeStore(pavilions, reviews)


@pytest.fixture
def review_factory():
    return make_review


@pytest.fixture
def pavilion_factory():
    return make_pavilion
