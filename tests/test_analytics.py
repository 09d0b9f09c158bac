import pytest

from reviewdesk.schemas.analytics import DashboardStats
from reviewdesk.services.analytics import (
    NEUTRAL_RATING,
    StatsHistory,
    category_ratings,
    compute_trends,
    normalize_charts,
    normalize_stats,
    percent_change,
)
from reviewdesk.services.reviews import normalize_review

BACKEND_STATS = {
    "success": True,
    "totalReviews": 10,
    "averageRating": 4.2,
    "totalRestaurants": 1,
    "reviewsByType": {"inRestaurant": 7, "delivery": 3},
    "activeUsers": 6,
    "responseRate": 40.0,
}


def _by_key(ratings):
    return {(r.type, r.criteria): r for r in ratings}


def test_category_ratings_split_by_review_type():
    reviews = [
        normalize_review({"comment": "a", "rating": 4, "food_rating": 5}),
        normalize_review({"comment": "b", "rating": 2, "food_rating": 3}),
        normalize_review({"comment": "c", "rating": 5, "type": "delivery", "service_rating": 2}),
    ]

    ratings = _by_key(category_ratings(reviews))

    assert len(ratings) == 9
    assert ratings["restaurant", "food"].value == 4.0
    assert ratings["restaurant", "service"].value == 3.0
    assert ratings["restaurant", "service"].count == 2
    assert ratings["restaurant", "cleanliness"].name == "Чистота"
    assert ratings["delivery", "deliverySpeed"].value == 2.0
    assert ratings["delivery", "deliveryQuality"].value == 5.0
    assert ratings["delivery", "food"].count == 1


def test_category_ratings_without_reviews_are_neutral():
    ratings = category_ratings([])
    assert {r.value for r in ratings} == {NEUTRAL_RATING}
    assert {r.count for r in ratings} == {0}
    assert [r.criteria for r in ratings if r.type == "delivery"] == ["food", "price", "deliverySpeed", "deliveryQuality"]


def test_unrated_review_counts_as_neutral():
    ratings = _by_key(category_ratings([normalize_review({"comment": "?"})]))
    assert ratings["restaurant", "food"].value == NEUTRAL_RATING
    assert ratings["restaurant", "food"].count == 1


def test_normalize_stats_counts_pending_from_reviews():
    reviews = [
        normalize_review({"comment": "a", "rating": 5, "response": "ok"}),
        normalize_review({"comment": "b", "rating": 4}),
        normalize_review({"comment": "c", "rating": 3}),
    ]

    stats = normalize_stats(BACKEND_STATS, reviews)

    assert stats.total_reviews == 10
    assert stats.average_rating == 4.2
    assert stats.pending_reviews == 2
    assert stats.response_rate == 40.0
    assert stats.active_users == 6
    assert stats.total_restaurants == 1
    assert stats.reviews_by_type.in_restaurant == 7
    assert stats.reviews_by_type.delivery == 3


def test_normalize_stats_prefers_reported_pending():
    stats = normalize_stats({**BACKEND_STATS, "pendingReviews": "5"}, [])
    assert stats.pending_reviews == 5


@pytest.mark.parametrize("payload", [None, [], "oops", {"totalReviews": "many", "averageRating": 42}])
def test_normalize_stats_tolerates_garbage(payload):
    stats = normalize_stats(payload)
    assert stats.total_reviews == 0
    assert stats.pending_reviews == 0
    assert 0 <= stats.average_rating <= 5


@pytest.mark.parametrize(
    "previous, current, expected",
    [(10, 12, 20), (4.0, 4.4, 10), (8, 7, -12), (0, 5, 0), (3, 3, 0)],
)
def test_percent_change(previous, current, expected):
    assert percent_change(previous, current) == expected


def test_trends_need_a_previous_snapshot():
    current = DashboardStats(total_reviews=12, average_rating=4.4, pending_reviews=3)
    assert compute_trends(None, current).model_dump() == {"total_reviews": 0, "average_rating": 0, "pending_reviews": 0}

    previous = DashboardStats(total_reviews=10, average_rating=4.0, pending_reviews=4)
    trends = compute_trends(previous, current)
    assert trends.total_reviews == 20
    assert trends.average_rating == 10
    assert trends.pending_reviews == -25


def test_stats_history_swaps_per_session():
    history = StatsHistory(max_items=2)
    first = DashboardStats(total_reviews=1)
    second = DashboardStats(total_reviews=2)

    assert history.swap("a", first) is None
    assert history.swap("a", second) == first
    assert history.swap("b", first) is None

    history.swap("c", first)
    # "a" was the oldest session and got evicted
    assert history.swap("a", first) is None


def test_stats_history_key_hides_token():
    assert StatsHistory.key_for(None) == StatsHistory.key_for("")
    assert StatsHistory.key_for("tok") != StatsHistory.key_for("other")
    assert "tok" not in StatsHistory.key_for("tok")


def test_normalize_charts():
    payload = {
        "success": True,
        "ratings": {"labels": ["10.03"], "datasets": [{"data": [4.5]}]},
        "volumeByDay": {"labels": ["10.03"], "datasets": [{"data": [2]}]},
        "ratingDistribution": {"labels": ["5 звезд"], "datasets": [{"data": [1]}]},
        "criteriaRatings": [{"name": "Еда", "score": "4.5"}, {"score": "3"}],
    }
    reviews = [normalize_review({"comment": "a", "rating": 5})]

    charts = normalize_charts(payload, reviews, "month")

    assert charts.period == "month"
    assert charts.ratings == payload["ratings"]
    assert charts.volume_by_day == payload["volumeByDay"]
    assert charts.rating_distribution == payload["ratingDistribution"]
    assert [(c.name, c.score) for c in charts.criteria_ratings] == [("Еда", 4.5)]
    assert charts.review_count == 1
    assert len(charts.restaurant_criteria_ratings) == 9


def test_normalize_charts_with_empty_payload():
    charts = normalize_charts(None, [], "week")
    assert charts.ratings is None
    assert charts.criteria_ratings == []
    assert charts.review_count == 0
