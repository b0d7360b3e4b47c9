"""
Review statistics derived from already-fetched collections.

Reviews and pavilions are any objects exposing ``pavilion_id``/``again`` and
``id`` attributes (the read schemas or ORM rows). Nothing here mutates its
input or touches the store.
"""
from typing import Iterable, Sequence, TypeVar

NO_RATINGS_MESSAGE = "no ratings yet"
UNRANKED = -1.0

T = TypeVar("T")


def tally(reviews: Iterable) -> dict[int, tuple[int, int]]:
    """Map pavilion id to ``(yes, total)``, skipping reviews with no flag set."""
    counts: dict[int, tuple[int, int]] = {}
    for review in reviews:
        if review.again is None:
            continue
        yes, total = counts.get(review.pavilion_id, (0, 0))
        counts[review.pavilion_id] = (yes + (1 if review.again else 0), total + 1)
    return counts


def _summary_from(counts: tuple[int, int]) -> str:
    yes, total = counts
    if total == 0:
        return NO_RATINGS_MESSAGE
    return f"{yes}/{total} people would return"


def _ratio_from(counts: tuple[int, int]) -> float:
    yes, total = counts
    if total == 0:
        return UNRANKED
    return yes / total


def summary(pavilion_id: int, reviews: Iterable) -> str:
    return _summary_from(tally(reviews).get(pavilion_id, (0, 0)))


def approval_ratio(pavilion_id: int, reviews: Iterable) -> float:
    return _ratio_from(tally(reviews).get(pavilion_id, (0, 0)))


def sort_by_approval(pavilions: Sequence[T], reviews: Iterable) -> list[T]:
    """Order pavilions by approval ratio, highest first, unranked last.

    ``sorted`` is stable even with ``reverse=True``, so equal ratios (the
    unranked sentinel included) keep their input order.
    """
    counts = tally(reviews)
    return sorted(
        pavilions,
        key=lambda p: _ratio_from(counts.get(p.id, (0, 0))),
        reverse=True,
    )


def stats_for(pavilion_id: int, counts: dict[int, tuple[int, int]]) -> tuple[str, float]:
    """Summary and ratio for one pavilion from a precomputed ``tally``."""
    pair = counts.get(pavilion_id, (0, 0))
    return _summary_from(pair), _ratio_from(pair)
