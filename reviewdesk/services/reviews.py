from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from reviewdesk.schemas.reviews import CanonicalReview, CriteriaRatings, ReviewType
from reviewdesk.services.dates import format_date, parse_date
from reviewdesk.services.fields import resolve
from reviewdesk.services.photos import collect_photos
from reviewdesk.services.ratings import CRITERIA, LIKES_FIELDS, clamp_rating, criterion_paths, safe_number

logger = logging.getLogger(__name__)

ANONYMOUS = "Аноним"

TEXT_FIELDS = ("comment", "text", "content")
AUTHOR_FIELDS = ("user_name", "user.name", "userName", "author.name", "author", "username", "name")
DATE_FIELDS = ("created_at", "createdAt", "date", "timestamp")
RESPONSE_FIELDS = ("response", "answer", "responseText")
RESTAURANT_ID_FIELDS = ("restaurant_id", "restaurantId", "restaurant.id")
RESTAURANT_NAME_FIELDS = ("restaurant_name", "restaurantName", "restaurant.name")
RESPONSE_DATE_FIELDS = ("response_date", "responseDate")
MANAGER_FIELDS = ("manager_name", "managerName")
TYPE_FIELDS = ("type", "reviewType", "review_type")
DELIVERY_FLAG_FIELDS = ("isDelivery", "is_delivery", "delivery")

DELIVERY = "delivery"
IN_RESTAURANT = "inRestaurant"

# Delivery reviews store their speed and quality marks in the service and
# atmosphere columns
DELIVERY_CRITERIA = {
    "food": "food",
    "price": "price",
    "deliverySpeed": "service",
    "deliveryQuality": "atmosphere",
}

# Shapes seen from the backend: {reviews: [...]}, {reviews: {reviews: [...]}}, bare list
ENVELOPE_PATHS = ("reviews", "reviews.reviews", "items", "data", "data.reviews")


def _first_text(record: Any, candidates: tuple[str, ...]) -> str | None:
    for path in candidates:
        value = resolve(record, [path])
        if isinstance(value, str) and value.strip():
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _is_responded(raw: Any) -> bool:
    return (
        bool(resolve(raw, ["response"]))
        or bool(resolve(raw, ["has_response", "hasResponse"]))
        or resolve(raw, ["responded"]) is True
    )


def detect_review_type(raw: Any) -> ReviewType:
    if any(resolve(raw, [path]) == DELIVERY for path in TYPE_FIELDS):
        return DELIVERY
    if any(resolve(raw, [path]) is True for path in DELIVERY_FLAG_FIELDS):
        return DELIVERY
    return IN_RESTAURANT


def display_criteria(criteria: dict[str, float], review_type: str) -> dict[str, float]:
    if review_type == DELIVERY:
        return {label: criteria[column] for label, column in DELIVERY_CRITERIA.items()}
    return dict(criteria)


def normalize_review(raw: Any) -> CanonicalReview:
    """Map one backend review payload, whatever its shape, onto ``CanonicalReview``."""
    raw_date = resolve(raw, DATE_FIELDS)
    criteria = {c: clamp_rating(resolve(raw, criterion_paths(c))) for c in CRITERIA}
    kind = detect_review_type(raw)

    return CanonicalReview(
        id=resolve(raw, ["id"]),
        text=_as_text(resolve(raw, TEXT_FIELDS)),
        rating=clamp_rating(resolve(raw, ["rating"])),
        criteria_ratings=CriteriaRatings(**criteria),
        created_at=parse_date(raw_date),
        created_at_display=format_date(raw_date),
        responded=_is_responded(raw),
        response=_first_text(raw, RESPONSE_FIELDS) or "",
        photos=collect_photos(raw),
        author_name=_first_text(raw, AUTHOR_FIELDS) or ANONYMOUS,
        restaurant_id=resolve(raw, RESTAURANT_ID_FIELDS),
        restaurant_name=_first_text(raw, RESTAURANT_NAME_FIELDS) or "",
        likes=int(safe_number(resolve(raw, LIKES_FIELDS))),
        review_type=kind,
        is_delivery=kind == DELIVERY,
        display_criteria=display_criteria(criteria, kind),
        response_date=parse_date(resolve(raw, RESPONSE_DATE_FIELDS)),
        manager_name=_first_text(raw, MANAGER_FIELDS) or "",
    )


def is_displayable(review: CanonicalReview) -> bool:
    return bool(review.text) and review.rating is not None


def extract_review_list(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    for path in ENVELOPE_PATHS:
        value = resolve(payload, [path])
        if isinstance(value, list):
            return value
    return []


def normalize_reviews(payload: Any) -> list[CanonicalReview]:
    """Unwrap a backend response and normalize every review in it.

    Reviews that fail ``is_displayable`` are dropped without an error.
    """
    raw_reviews = extract_review_list(payload)
    normalized = [normalize_review(raw) for raw in raw_reviews]
    kept = [r for r in normalized if is_displayable(r)]

    if len(kept) < len(normalized):
        logger.debug("Dropped %s of %s reviews without text", len(normalized) - len(kept), len(normalized))

    return kept
