from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

import anyio
from fastapi import APIRouter, Depends, Query, Response

from reviewdesk.client.api import BackendAPI
from reviewdesk.core.config import settings
from reviewdesk.core.deps import get_backend_api, get_stats_history, oauth2_scheme
from reviewdesk.schemas.analytics import ChartData, ChartPeriod, StatsResponse
from reviewdesk.schemas.restaurants import RestaurantListResponse, SortMode
from reviewdesk.schemas.reviews import ManagerResponseCreate, ManagerResponseResult, ReviewListResponse
from reviewdesk.services.analytics import StatsHistory, compute_trends, normalize_charts, normalize_stats
from reviewdesk.services.dashboard import (
    DashboardState,
    FetchStarted,
    FetchSucceeded,
    ResponseStatus,
    ReviewFilters,
    reduce,
)
from reviewdesk.services.export import export_filename, reviews_to_csv
from reviewdesk.services.fields import resolve
from reviewdesk.services.photos import absolute_photos
from reviewdesk.services.ratings import aggregate_restaurants, sort_aggregates
from reviewdesk.services.reviews import normalize_review, normalize_reviews

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manager", tags=["manager"])


def _load_dashboard(payload: Any, **state: Any) -> DashboardState:
    current = reduce(DashboardState(**state), FetchStarted())
    return reduce(current, FetchSucceeded(generation=current.generation, payload=payload))


def _restaurant_names(payload: Any) -> dict[str, str]:
    if isinstance(payload, Mapping):
        payload = resolve(payload, ["restaurants", "items", "data"], default=[])
    if not isinstance(payload, list):
        return {}

    names: dict[str, str] = {}
    for restaurant in payload:
        restaurant_id = resolve(restaurant, ["id", "restaurant_id"])
        name = resolve(restaurant, ["name", "title"])
        if restaurant_id is not None and isinstance(name, str) and name:
            names[str(restaurant_id)] = name
    return names


@router.get("/reviews", response_model=ReviewListResponse)
def list_reviews(
    status: ResponseStatus = Query(default="all"),
    rating: int | None = Query(default=None, ge=1, le=5),
    search: str = Query(default="", max_length=200),
    api: BackendAPI = Depends(get_backend_api),
) -> ReviewListResponse:
    filters = ReviewFilters(status=status, rating=rating, search=search)
    state = _load_dashboard(api.manager_reviews(), filters=filters)
    media_root = settings.media_root()
    items = [r.model_copy(update={"photos": absolute_photos(r.photos, media_root)}) for r in state.visible_reviews]
    return ReviewListResponse(items=items, total=len(items))


@router.get("/restaurants", response_model=RestaurantListResponse)
async def restaurant_summary(
    sort: SortMode = Query(default="rating"),
    api: BackendAPI = Depends(get_backend_api),
) -> RestaurantListResponse:
    # both requests must finish before aggregating
    reviews_payload, restaurants_payload = await asyncio.gather(
        anyio.to_thread.run_sync(api.manager_reviews),
        anyio.to_thread.run_sync(api.manager_restaurants),
    )

    names = _restaurant_names(restaurants_payload)
    reviews = normalize_reviews(reviews_payload)

    def key_fn(review: Any) -> str | None:
        if review.restaurant_name:
            return review.restaurant_name
        if review.restaurant_id is None:
            return None
        return names.get(str(review.restaurant_id))

    aggregates = sort_aggregates(aggregate_restaurants(reviews, key_fn=key_fn), sort)
    logger.info("Aggregated %s reviews into %s restaurants", len(reviews), len(aggregates))
    return RestaurantListResponse(items=aggregates, total=len(aggregates))


@router.get("/reviews/export")
def export_reviews(api: BackendAPI = Depends(get_backend_api)) -> Response:
    state = _load_dashboard(api.manager_reviews())
    content = reviews_to_csv(state.visible_reviews)
    filename = export_filename(date.today(), prefix=settings.export_filename_prefix)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/reviews/{review_id}/response", response_model=ManagerResponseResult)
def respond_to_review(
    review_id: str,
    payload: ManagerResponseCreate,
    api: BackendAPI = Depends(get_backend_api),
) -> ManagerResponseResult:
    result = api.respond_to_review(review_id, payload.text.strip())

    raw_review = resolve(result, ["review", "data"]) if isinstance(result, Mapping) else None
    review = normalize_review(raw_review) if isinstance(raw_review, Mapping) else None
    return ManagerResponseResult(review_id=review_id, responded=True, review=review)


@router.get("/stats", response_model=StatsResponse)
async def dashboard_stats(
    api: BackendAPI = Depends(get_backend_api),
    history: StatsHistory = Depends(get_stats_history),
    token: str | None = Depends(oauth2_scheme),
) -> StatsResponse:
    stats_payload, reviews_payload = await asyncio.gather(
        anyio.to_thread.run_sync(api.analytics_stats),
        anyio.to_thread.run_sync(api.manager_reviews),
    )

    stats = normalize_stats(stats_payload, normalize_reviews(reviews_payload))
    previous = history.swap(StatsHistory.key_for(token), stats)
    return StatsResponse(stats=stats, previous=previous, trends=compute_trends(previous, stats))


@router.get("/charts", response_model=ChartData)
async def dashboard_charts(
    period: ChartPeriod = Query(default="week"),
    api: BackendAPI = Depends(get_backend_api),
) -> ChartData:
    charts_payload, reviews_payload = await asyncio.gather(
        anyio.to_thread.run_sync(api.analytics_charts, period),
        anyio.to_thread.run_sync(api.manager_reviews),
    )
    return normalize_charts(charts_payload, normalize_reviews(reviews_payload), period)
