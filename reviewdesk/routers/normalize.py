from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Query

from reviewdesk.schemas.restaurants import RestaurantListResponse, SortMode
from reviewdesk.schemas.reviews import ReviewListResponse
from reviewdesk.services.ratings import aggregate_restaurants, sort_aggregates
from reviewdesk.services.reviews import extract_review_list, normalize_reviews

router = APIRouter(prefix="/normalize", tags=["normalize"])


@router.post("/reviews", response_model=ReviewListResponse)
def normalize_review_payload(payload: Any = Body(default=None)) -> ReviewListResponse:
    items = normalize_reviews(payload)
    dropped = len(extract_review_list(payload)) - len(items)
    return ReviewListResponse(items=items, total=len(items), dropped=dropped)


@router.post("/restaurants", response_model=RestaurantListResponse)
def aggregate_review_payload(
    payload: Any = Body(default=None),
    sort: SortMode = Query(default="rating"),
) -> RestaurantListResponse:
    aggregates = sort_aggregates(aggregate_restaurants(normalize_reviews(payload)), sort)
    return RestaurantListResponse(items=aggregates, total=len(aggregates))
