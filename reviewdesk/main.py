from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewdesk.client.api import APIError
from reviewdesk.core.config import settings
from reviewdesk.core.logging_config import configure_logging
from reviewdesk.routers import manager, normalize

configure_logging(log_dir=settings.log_dir, level=settings.log_level)
logger = logging.getLogger(__name__)


def _status_for(error: APIError) -> int:
    # 4xx from the backend belong to the caller, anything else is a gateway failure
    if 400 <= error.status_code < 500:
        return error.status_code
    if error.status_code == 503:
        return 503
    return 502


def create_app() -> FastAPI:
    app = FastAPI(title="Review Desk", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(APIError)
    async def backend_error(request: Request, exc: APIError) -> JSONResponse:
        logger.warning("Backend error on %s: %s %s", request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=_status_for(exc), content={"detail": exc.message})

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        duration_ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration_ms)
        return response

    app.include_router(normalize.router)
    app.include_router(manager.router)

    return app


app = create_app()
