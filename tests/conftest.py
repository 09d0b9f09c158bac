import os
import tempfile
from pathlib import Path

_tmpdir = Path(tempfile.mkdtemp(prefix="reviewdesk_test_"))

os.environ.setdefault("LOG_DIR", str(_tmpdir / "logs"))
os.environ.setdefault("BACKEND_API_URL", "http://backend.test/api")

import pytest
from fastapi.testclient import TestClient

from reviewdesk.core.deps import get_backend_api, get_stats_history
from reviewdesk.main import create_app
from reviewdesk.services.analytics import StatsHistory


class FakeBackend:
    """Stands in for BackendAPI; records forwarded manager responses."""

    def __init__(self, reviews=None, restaurants=None, error=None):
        self._reviews = reviews if reviews is not None else []
        self._restaurants = restaurants if restaurants is not None else []
        self._stats = {}
        self._charts = {}
        self._error = error
        self.responses: list[tuple[str, str]] = []
        self.chart_periods: list[str] = []

    def _check(self):
        if self._error is not None:
            raise self._error

    def manager_reviews(self):
        self._check()
        return self._reviews

    def manager_restaurants(self):
        self._check()
        return self._restaurants

    def analytics_stats(self):
        self._check()
        return self._stats

    def analytics_charts(self, period="week"):
        self._check()
        self.chart_periods.append(period)
        return self._charts

    def respond_to_review(self, review_id, text):
        self._check()
        self.responses.append((review_id, text))
        return {"success": True, "review": {"id": review_id, "comment": "Вкусно", "rating": 5, "response": text}}


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def client(backend):
    app = create_app()
    app.dependency_overrides[get_backend_api] = lambda: backend
    history = StatsHistory()
    app.dependency_overrides[get_stats_history] = lambda: history
    with TestClient(app) as c:
        yield c
