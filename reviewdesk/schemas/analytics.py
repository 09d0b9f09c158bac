from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ChartPeriod = Literal["week", "month", "year"]
CategoryGroup = Literal["restaurant", "delivery"]


class ReviewsByType(BaseModel):
    in_restaurant: int = 0
    delivery: int = 0


class DashboardStats(BaseModel):
    total_reviews: int = 0
    average_rating: float = 0
    pending_reviews: int = 0
    response_rate: float = 0
    active_users: int = 0
    total_restaurants: int = 0
    reviews_by_type: ReviewsByType = Field(default_factory=ReviewsByType)


class StatsTrends(BaseModel):
    """Whole-percent change against the previous snapshot."""

    total_reviews: int = 0
    average_rating: int = 0
    pending_reviews: int = 0


class StatsResponse(BaseModel):
    stats: DashboardStats
    previous: DashboardStats | None = None
    trends: StatsTrends


class CategoryRating(BaseModel):
    criteria: str
    name: str
    value: float
    count: int
    type: CategoryGroup


class CriterionScore(BaseModel):
    name: str
    score: float


class ChartData(BaseModel):
    period: ChartPeriod
    ratings: Any = None
    volume_by_day: Any = None
    rating_distribution: Any = None
    criteria_ratings: list[CriterionScore] = Field(default_factory=list)
    restaurant_criteria_ratings: list[CategoryRating] = Field(default_factory=list)
    review_count: int = 0
