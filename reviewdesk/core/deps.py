from __future__ import annotations

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from reviewdesk.client.api import BackendAPI
from reviewdesk.core.config import settings
from reviewdesk.services.analytics import StatsHistory

# The backend checks the token; it is only forwarded from here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

_stats_history = StatsHistory()


def get_backend_api(token: str | None = Depends(oauth2_scheme)) -> BackendAPI:
    return BackendAPI(
        settings.backend_api_url,
        token_getter=lambda: token,
        timeout=settings.backend_timeout_seconds,
    )


def get_stats_history() -> StatsHistory:
    return _stats_history
