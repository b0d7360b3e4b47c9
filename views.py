"""
View state for the catalog and detail surfaces.

Each view owns its own copy of what it fetched. Toggles and selection only
re-render from that copy; the store is touched by ``load`` and by review
submission, nothing else.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable

from aggregator import approval_ratio, sort_by_approval, stats_for, summary, tally
from schemas.catalog import CatalogItem, CatalogRead, Order, Presentation
from schemas.pavilion import PavilionDetailRead, PavilionRead, SelectionRead
from schemas.review import ReviewRead
from schemas.shared import ANONYMOUS_NAME
from store import StoreError, TableStore

logger = logging.getLogger("pavilions.views")

NOT_FOUND_MESSAGE = "Pavilion not found"
SUBMIT_FAILED_MESSAGE = "Failed to submit review. Please try again."


class ViewState(str, Enum):
    loading = "loading"
    not_found = "not_found"
    ready = "ready"


class ReviewForm:
    """One review submission surface bound to a pavilion.

    ``again`` stays ``None`` until the user picks yes or no, and the form
    cannot be submitted before that, nor while it is closed. ``on_created``
    receives each review the store accepted.
    """

    def __init__(
        self,
        store: TableStore,
        pavilion_id: int,
        on_created: Callable[[ReviewRead], None] | None = None,
    ):
        self._store = store
        self._on_created = on_created
        self.pavilion_id = pavilion_id
        self.name = ""
        self.comment = ""
        self.again: bool | None = None
        self.is_open = True
        self.in_flight = False
        self.error: str | None = None

    @property
    def can_submit(self) -> bool:
        return (
            self.is_open
            and bool(self.comment.strip())
            and self.again is not None
            and not self.in_flight
        )

    def open(self):
        self.is_open = True
        self.error = None

    def to_record(self) -> dict:
        return {
            "pavilion_id": self.pavilion_id,
            "name": self.name.strip() or ANONYMOUS_NAME,
            "comment": self.comment.strip(),
            "again": self.again,
        }

    def clear(self):
        self.name = ""
        self.comment = ""
        self.again = None

    async def submit(self) -> ReviewRead | None:
        if not self.can_submit:
            return None
        # set before the first await so a second click sees it
        self.in_flight = True
        self.error = None
        try:
            created = await self._store.insert_review(self.to_record())
        except StoreError as exc:
            logger.error("Review submission for pavilion %s failed: %s", self.pavilion_id, exc)
            self.error = SUBMIT_FAILED_MESSAGE
            return None
        finally:
            self.in_flight = False

        self.clear()
        self.is_open = False
        if self._on_created is not None:
            self._on_created(created)
        return created


class CatalogView:
    def __init__(
        self,
        store: TableStore,
        presentation: Presentation = Presentation.list,
        order: Order = Order.default,
    ):
        self._store = store
        self.presentation = presentation
        self.order = order
        self.pavilions: list[PavilionRead] = []
        self.reviews: list[ReviewRead] = []
        self.loaded = False

    async def load(self):
        """Fetch pavilions and reviews together; either may fail on its own."""
        pavilions, reviews = await asyncio.gather(
            self._store.list_pavilions(),
            self._store.list_reviews(),
            return_exceptions=True,
        )
        self.pavilions = _or_empty(pavilions, "pavilions")
        self.reviews = _or_empty(reviews, "reviews")
        self.loaded = True

    def set_presentation(self, presentation: Presentation):
        self.presentation = Presentation(presentation)

    def set_order(self, order: Order):
        self.order = Order(order)

    def toggle_presentation(self):
        self.presentation = (
            Presentation.block if self.presentation is Presentation.list else Presentation.list
        )

    def toggle_order(self):
        self.order = Order.rating if self.order is Order.default else Order.default

    def ordered(self) -> list[PavilionRead]:
        if self.order is Order.rating:
            return sort_by_approval(self.pavilions, self.reviews)
        return list(self.pavilions)

    def render(self) -> CatalogRead:
        counts = tally(self.reviews)
        items = []
        for pavilion in self.ordered():
            text, ratio = stats_for(pavilion.id, counts)
            items.append(
                CatalogItem(**pavilion.model_dump(), summary=text, approval_ratio=ratio)
            )
        return CatalogRead(presentation=self.presentation, order=self.order, items=items)

    def select(self, pavilion_id: int) -> SelectionRead | None:
        pavilion = next((p for p in self.pavilions if p.id == pavilion_id), None)
        if pavilion is None:
            return None
        return SelectionRead(
            pavilion=pavilion,
            reviews=[r for r in self.reviews if r.pavilion_id == pavilion_id],
            summary=summary(pavilion_id, self.reviews),
            approval_ratio=approval_ratio(pavilion_id, self.reviews),
        )

    def review_form(self, pavilion_id: int) -> ReviewForm:
        return ReviewForm(self._store, pavilion_id, on_created=self._append)

    def _append(self, review: ReviewRead):
        self.reviews.append(review)


class DetailView:
    def __init__(self, store: TableStore, pavilion_id: int):
        self._store = store
        self.pavilion_id = pavilion_id
        self.pavilion: PavilionRead | None = None
        self.reviews: list[ReviewRead] = []
        self.state = ViewState.loading
        self.form = ReviewForm(store, pavilion_id, on_created=self._prepend)
        # opened once the pavilion is known to exist
        self.form.is_open = False

    async def load(self):
        try:
            self.pavilion = await self._store.get_pavilion(self.pavilion_id)
        except StoreError as exc:
            logger.warning("Could not load pavilion %s: %s", self.pavilion_id, exc)
            self.pavilion = None
        if self.pavilion is None:
            self.state = ViewState.not_found
            return

        try:
            self.reviews = await self._store.list_reviews(self.pavilion_id)
        except StoreError as exc:
            logger.warning("Could not load reviews for pavilion %s: %s", self.pavilion_id, exc)
            self.reviews = []
        self.state = ViewState.ready
        self.form.open()

    def _prepend(self, review: ReviewRead):
        self.reviews.insert(0, review)

    def render(self) -> PavilionDetailRead | None:
        if self.state is not ViewState.ready:
            return None
        return PavilionDetailRead(
            pavilion=self.pavilion,
            reviews=self.reviews,
            summary=summary(self.pavilion_id, self.reviews),
            approval_ratio=approval_ratio(self.pavilion_id, self.reviews),
        )


def _or_empty(result, what: str) -> list:
    if isinstance(result, StoreError):
        logger.warning("Could not load %s, showing none: %s", what, result)
        return []
    if isinstance(result, BaseException):
        raise result
    return result
