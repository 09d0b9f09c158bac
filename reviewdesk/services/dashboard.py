"""Manager dashboard state.

All state changes of the dashboard go through ``reduce``. Each fetch bumps
``generation``; a completion that carries an older generation belongs to a
superseded request and is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from reviewdesk.schemas.restaurants import RestaurantAggregate
from reviewdesk.schemas.reviews import CanonicalReview
from reviewdesk.services.ratings import SORT_MODES, aggregate_restaurants, sort_aggregates
from reviewdesk.services.reviews import normalize_reviews

logger = logging.getLogger(__name__)

ResponseStatus = Literal["all", "pending", "responded"]


@dataclass(frozen=True)
class ReviewFilters:
    status: ResponseStatus = "all"
    rating: int | None = None
    search: str = ""


@dataclass(frozen=True)
class FetchStarted:
    pass


@dataclass(frozen=True)
class FetchSucceeded:
    generation: int
    payload: Any


@dataclass(frozen=True)
class FetchFailed:
    generation: int
    message: str


@dataclass(frozen=True)
class FiltersChanged:
    filters: ReviewFilters


@dataclass(frozen=True)
class SortChanged:
    mode: str


@dataclass(frozen=True)
class DashboardState:
    generation: int = 0
    loading: bool = False
    reviews: tuple[CanonicalReview, ...] = ()
    restaurants: tuple[RestaurantAggregate, ...] = ()
    error: str | None = None
    filters: ReviewFilters = field(default_factory=ReviewFilters)
    sort_mode: str = "rating"

    @property
    def visible_reviews(self) -> list[CanonicalReview]:
        return sort_newest_first(filter_reviews(self.reviews, self.filters))


def _matches(review: CanonicalReview, filters: ReviewFilters) -> bool:
    if filters.status == "pending" and review.responded:
        return False
    if filters.status == "responded" and not review.responded:
        return False

    if filters.rating is not None and review.rating != filters.rating:
        return False

    term = filters.search.strip().lower()
    if term:
        haystacks = (review.text, review.author_name, review.restaurant_name)
        if not any(term in h.lower() for h in haystacks):
            return False

    return True


def filter_reviews(reviews, filters: ReviewFilters) -> list[CanonicalReview]:
    return [r for r in reviews if _matches(r, filters)]


def sort_newest_first(reviews) -> list[CanonicalReview]:
    # undated reviews go last, ties keep backend order
    return sorted(
        reviews,
        key=lambda r: (r.created_at is None, -r.created_at.timestamp() if r.created_at else 0.0),
    )


def _is_stale(state: DashboardState, generation: int) -> bool:
    if generation != state.generation:
        logger.debug("Ignoring result of superseded fetch %s (current %s)", generation, state.generation)
        return True
    return False


def reduce(state: DashboardState, action: Any) -> DashboardState:
    if isinstance(action, FetchStarted):
        return replace(state, generation=state.generation + 1, loading=True, error=None)

    if isinstance(action, FetchSucceeded):
        if _is_stale(state, action.generation):
            return state
        reviews = tuple(normalize_reviews(action.payload))
        restaurants = tuple(sort_aggregates(aggregate_restaurants(reviews), state.sort_mode))
        return replace(state, loading=False, reviews=reviews, restaurants=restaurants, error=None)

    if isinstance(action, FetchFailed):
        if _is_stale(state, action.generation):
            return state
        # keep the last good data on screen
        return replace(state, loading=False, error=action.message)

    if isinstance(action, FiltersChanged):
        return replace(state, filters=action.filters)

    if isinstance(action, SortChanged):
        if action.mode not in SORT_MODES:
            raise ValueError(f"Unknown sort mode: {action.mode!r}")
        return replace(state, sort_mode=action.mode, restaurants=tuple(sort_aggregates(state.restaurants, action.mode)))

    raise TypeError(f"Unknown dashboard action: {action!r}")
