from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

SortMode = Literal["rating", "likes", "newest"]


class RestaurantAggregate(BaseModel):
    name: str
    total_reviews: int
    avg_rating: float
    avg_food_rating: float
    avg_service_rating: float
    avg_atmosphere_rating: float
    avg_price_rating: float
    avg_cleanliness_rating: float
    total_likes: int
    latest_review_date: datetime | None = None


class RestaurantListResponse(BaseModel):
    items: list[RestaurantAggregate]
    total: int
