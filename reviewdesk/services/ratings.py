from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from reviewdesk.schemas.restaurants import RestaurantAggregate
from reviewdesk.services.dates import parse_date
from reviewdesk.services.fields import resolve, to_number

logger = logging.getLogger(__name__)

CRITERIA = ("food", "service", "atmosphere", "price", "cleanliness")
MIN_RATING = 0.0
MAX_RATING = 5.0

SORT_MODES = ("rating", "likes", "newest")

RESTAURANT_KEY_FIELDS = ("restaurant_name", "restaurantName", "restaurant.name")
REVIEW_DATE_FIELDS = ("date", "created_at", "createdAt", "timestamp")
LIKES_FIELDS = ("likes", "likes_count", "likesCount")


def safe_number(value: Any) -> float:
    number = to_number(value)
    return 0.0 if number is None else number


def clamp_rating(value: Any) -> float:
    return max(MIN_RATING, min(MAX_RATING, safe_number(value)))


def round_half_up(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def star_count(value: Any) -> int:
    """Number of filled stars to draw for a rating."""
    return int(max(MIN_RATING, min(MAX_RATING, math.floor(safe_number(value) + 0.5))))


def criterion_paths(criterion: str) -> list[str]:
    return [
        f"{criterion}_rating",
        f"ratings.{criterion}",
        f"criteriaRatings.{criterion}",
        f"criteria_ratings.{criterion}",
    ]


def restaurant_key(review: Any) -> str | None:
    # first non-blank name wins
    for path in RESTAURANT_KEY_FIELDS:
        name = resolve(review, [path])
        if isinstance(name, str) and name.strip():
            return name
    return None


@dataclass
class _Totals:
    name: str
    reviews: int = 0
    rating: float = 0.0
    likes: float = 0.0
    latest: datetime | None = None
    criteria: dict[str, float] = field(default_factory=lambda: dict.fromkeys(CRITERIA, 0.0))

    def add(self, review: Any) -> None:
        self.reviews += 1
        self.rating += clamp_rating(resolve(review, ["rating"]))
        for criterion in CRITERIA:
            self.criteria[criterion] += clamp_rating(resolve(review, criterion_paths(criterion)))
        self.likes += safe_number(resolve(review, LIKES_FIELDS))

        reviewed_at = parse_date(resolve(review, REVIEW_DATE_FIELDS))
        if reviewed_at and (self.latest is None or reviewed_at > self.latest):
            self.latest = reviewed_at

    def average(self, total: float) -> float:
        return round_half_up(total / self.reviews)

    def to_aggregate(self) -> RestaurantAggregate:
        return RestaurantAggregate(
            name=self.name,
            total_reviews=self.reviews,
            avg_rating=self.average(self.rating),
            avg_food_rating=self.average(self.criteria["food"]),
            avg_service_rating=self.average(self.criteria["service"]),
            avg_atmosphere_rating=self.average(self.criteria["atmosphere"]),
            avg_price_rating=self.average(self.criteria["price"]),
            avg_cleanliness_rating=self.average(self.criteria["cleanliness"]),
            total_likes=max(0, int(self.likes)),
            latest_review_date=self.latest,
        )


def aggregate_restaurants(
    reviews: Iterable[Any],
    key_fn: Callable[[Any], Any] = restaurant_key,
) -> dict[Any, RestaurantAggregate]:
    """Roll reviews up per restaurant.

    Reviews whose key is falsy are skipped. Raw payload dicts and
    ``CanonicalReview`` models are both accepted; every numeric field is
    coerced, so malformed values count as zero instead of poisoning the sums.
    """
    totals: dict[Any, _Totals] = {}
    skipped = 0
    for review in reviews:
        key = key_fn(review)
        if not key:
            skipped += 1
            continue
        if key not in totals:
            totals[key] = _Totals(name=str(key))
        totals[key].add(review)

    if skipped:
        logger.debug("Skipped %s reviews without a restaurant key", skipped)

    return {key: t.to_aggregate() for key, t in totals.items()}


def sort_aggregates(
    aggregates: Mapping[Any, RestaurantAggregate] | Iterable[RestaurantAggregate],
    mode: str = "rating",
) -> list[RestaurantAggregate]:
    items = list(aggregates.values() if isinstance(aggregates, Mapping) else aggregates)

    if mode == "rating":
        return sorted(items, key=lambda a: -a.avg_rating)
    if mode == "likes":
        return sorted(items, key=lambda a: -a.total_likes)
    if mode == "newest":
        return sorted(
            items,
            key=lambda a: (
                a.latest_review_date is None,
                -a.latest_review_date.timestamp() if a.latest_review_date else 0.0,
            ),
        )
    raise ValueError(f"Unknown sort mode: {mode!r}. Expected one of {SORT_MODES}")
