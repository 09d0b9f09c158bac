from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class APIError(Exception):
    status_code: int
    message: str
    details: Any = None


class BackendAPI:
    """Client of the review platform REST backend (``/api/...``)."""

    def __init__(self, base_url: str, token_getter: Callable[[], Optional[str]], timeout: float = 20):
        self.base_url = base_url.rstrip("/")
        self.token_getter = token_getter
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json"}
        token = self.token_getter()
        if token:
            h["Authorization"] = f"Bearer {token}"
        return h

    def request(self, method: str, path: str, *,
                params: Optional[dict] = None,
                json: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(
                method=method.upper(),
                url=url,
                headers=self._headers(),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Backend unreachable: %s %s: %s", method.upper(), url, e)
            raise APIError(503, "Backend unavailable", str(e)) from e

        # Backend error pages are not always JSON
        try:
            payload = resp.json()
        except ValueError:
            payload = resp.text

        if resp.status_code >= 400:
            msg = None
            if isinstance(payload, dict):
                msg = payload.get("message") or payload.get("error") or payload.get("detail")
            logger.info("Backend %s %s -> %s", method.upper(), path, resp.status_code)
            raise APIError(resp.status_code, msg or f"HTTP {resp.status_code}", payload)

        return payload

    # --- Manager ---
    def manager_reviews(self) -> Any:
        return self.request("GET", "/manager/reviews")

    def manager_restaurants(self) -> Any:
        return self.request("GET", "/manager/restaurants")

    def respond_to_review(self, review_id: str | int, text: str) -> Any:
        return self.request("POST", f"/manager/reviews/{review_id}/response", json={"text": text})

    def analytics_stats(self) -> Any:
        return self.request("GET", "/manager/analytics/stats")

    def analytics_charts(self, period: str = "week") -> Any:
        return self.request("GET", "/manager/analytics/charts", params={"period": period})
