from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReviewType = Literal["inRestaurant", "delivery"]


class Photo(BaseModel):
    url: str


class CriteriaRatings(BaseModel):
    food: float = 0
    service: float = 0
    atmosphere: float = 0
    price: float = 0
    cleanliness: float = 0


class CanonicalReview(BaseModel):
    id: Any = None
    text: str = ""
    rating: float = 0
    criteria_ratings: CriteriaRatings = Field(default_factory=CriteriaRatings)
    created_at: datetime | None = None
    created_at_display: str
    responded: bool = False
    response: str = ""
    photos: list[Photo] = Field(default_factory=list)
    author_name: str
    restaurant_id: Any = None
    restaurant_name: str = ""
    likes: int = 0
    review_type: ReviewType = "inRestaurant"
    is_delivery: bool = False
    # criteria under the labels shown for this review type
    display_criteria: dict[str, float] = Field(default_factory=dict)
    response_date: datetime | None = None
    manager_name: str = ""


class ReviewListResponse(BaseModel):
    items: list[CanonicalReview]
    total: int
    dropped: int = 0


class ManagerResponseCreate(BaseModel):
    text: str = Field(min_length=1, max_length=2000)


class ManagerResponseResult(BaseModel):
    review_id: str
    responded: bool
    review: CanonicalReview | None = None
