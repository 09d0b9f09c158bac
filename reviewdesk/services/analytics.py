from __future__ import annotations

import hashlib
import logging
import math
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from reviewdesk.schemas.analytics import (
    CategoryRating,
    ChartData,
    CriterionScore,
    DashboardStats,
    ReviewsByType,
    StatsTrends,
)
from reviewdesk.schemas.reviews import CanonicalReview
from reviewdesk.services.fields import resolve
from reviewdesk.services.ratings import clamp_rating, round_half_up, safe_number
from reviewdesk.services.reviews import DELIVERY, DELIVERY_CRITERIA

logger = logging.getLogger(__name__)

CRITERIA_NAMES = {
    "food": "Качество блюд",
    "service": "Уровень сервиса",
    "atmosphere": "Атмосфера",
    "price": "Цена/Качество",
    "cleanliness": "Чистота",
    "deliverySpeed": "Скорость доставки",
    "deliveryQuality": "Качество доставки",
}

RESTAURANT_CATEGORIES = ("food", "service", "atmosphere", "price", "cleanliness")
DELIVERY_CATEGORIES = tuple(DELIVERY_CRITERIA)

# Shown for a category nobody has rated yet, and for a review with no rating
NEUTRAL_RATING = 3.0


def _category_group(
    reviews: list[CanonicalReview], categories: tuple[str, ...], group: str
) -> list[CategoryRating]:
    sums = dict.fromkeys(categories, 0.0)
    for review in reviews:
        overall = review.rating or NEUTRAL_RATING
        for category in categories:
            # unrated criterion counts as the overall mark
            sums[category] += review.display_criteria.get(category) or overall

    count = len(reviews)
    return [
        CategoryRating(
            criteria=category,
            name=CRITERIA_NAMES[category],
            value=round_half_up(sums[category] / count) if count else NEUTRAL_RATING,
            count=count,
            type=group,
        )
        for category in categories
    ]


def category_ratings(reviews: Iterable[CanonicalReview]) -> list[CategoryRating]:
    """Average criterion marks, separately for in-restaurant and delivery reviews."""
    reviews = list(reviews)
    delivery = [r for r in reviews if r.review_type == DELIVERY]
    in_restaurant = [r for r in reviews if r.review_type != DELIVERY]

    logger.debug("Category ratings over %s in-restaurant and %s delivery reviews", len(in_restaurant), len(delivery))
    return _category_group(in_restaurant, RESTAURANT_CATEGORIES, "restaurant") + _category_group(
        delivery, DELIVERY_CATEGORIES, "delivery"
    )


def _count(payload: Any, candidates: list[str]) -> int:
    return max(0, int(safe_number(resolve(payload, candidates))))


def normalize_stats(payload: Any, reviews: Iterable[CanonicalReview] | None = None) -> DashboardStats:
    """Map the backend statistics payload onto ``DashboardStats``.

    The backend does not always report pending reviews; when ``reviews`` is
    given they are counted from it instead.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    pending = resolve(payload, ["pendingReviews", "pending_reviews"])
    if pending is None and reviews is not None:
        pending = sum(1 for r in reviews if not r.responded)

    return DashboardStats(
        total_reviews=_count(payload, ["totalReviews", "total_reviews"]),
        average_rating=round_half_up(clamp_rating(resolve(payload, ["averageRating", "average_rating"]))),
        pending_reviews=max(0, int(safe_number(pending))),
        response_rate=round_half_up(safe_number(resolve(payload, ["responseRate", "response_rate"]))),
        active_users=_count(payload, ["activeUsers", "active_users"]),
        total_restaurants=_count(payload, ["totalRestaurants", "total_restaurants"]),
        reviews_by_type=ReviewsByType(
            in_restaurant=_count(payload, ["reviewsByType.inRestaurant", "reviews_by_type.in_restaurant"]),
            delivery=_count(payload, ["reviewsByType.delivery", "reviews_by_type.delivery"]),
        ),
    )


def percent_change(previous: float, current: float) -> int:
    if previous <= 0:
        return 0
    return math.floor((current - previous) / previous * 100 + 0.5)


def compute_trends(previous: DashboardStats | None, current: DashboardStats) -> StatsTrends:
    if previous is None:
        return StatsTrends()
    return StatsTrends(
        total_reviews=percent_change(previous.total_reviews, current.total_reviews),
        average_rating=percent_change(previous.average_rating, current.average_rating),
        pending_reviews=percent_change(previous.pending_reviews, current.pending_reviews),
    )


class StatsHistory:
    """Last statistics snapshot per manager session, used as the trend baseline."""

    def __init__(self, max_items: int = 512):
        self.max_items = max_items
        self._data: dict[str, DashboardStats] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key_for(token: str | None) -> str:
        return hashlib.sha256((token or "").encode("utf-8")).hexdigest()

    def swap(self, key: str, stats: DashboardStats) -> DashboardStats | None:
        """Store ``stats`` and return the snapshot it replaces."""
        with self._lock:
            previous = self._data.pop(key, None)
            if len(self._data) >= self.max_items:
                self._data.pop(next(iter(self._data)), None)
            self._data[key] = stats
        return previous

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


def _criterion_scores(raw: Any) -> list[CriterionScore]:
    if not isinstance(raw, list):
        return []
    scores = []
    for item in raw:
        name = resolve(item, ["name", "criteria"])
        if isinstance(name, str) and name:
            scores.append(CriterionScore(name=name, score=safe_number(resolve(item, ["score", "value"]))))
    return scores


def normalize_charts(payload: Any, reviews: Iterable[CanonicalReview], period: str) -> ChartData:
    """Combine the backend chart series with per-category averages of ``reviews``."""
    reviews = list(reviews)
    if not isinstance(payload, Mapping):
        payload = {}

    review_count = resolve(payload, ["reviewCount", "review_count"])
    return ChartData(
        period=period,
        ratings=resolve(payload, ["ratings"]),
        volume_by_day=resolve(payload, ["volumeByDay", "volume_by_day"]),
        rating_distribution=resolve(payload, ["ratingDistribution", "rating_distribution"]),
        criteria_ratings=_criterion_scores(resolve(payload, ["criteriaRatings", "criteria_ratings"])),
        restaurant_criteria_ratings=category_ratings(reviews),
        review_count=len(reviews) if review_count is None else max(0, int(safe_number(review_count))),
    )
