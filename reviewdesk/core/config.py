from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env early for local development
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Review platform REST backend
    backend_api_url: str = os.getenv("BACKEND_API_URL", "http://127.0.0.1:5000/api")
    backend_timeout_seconds: float = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "20"))

    # Host serving uploaded photos; empty means the backend host without "/api"
    media_base_url: str = os.getenv("MEDIA_BASE_URL", "")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "./logs")

    # CSV export
    export_filename_prefix: str = os.getenv("EXPORT_FILENAME_PREFIX", "reviews_export")

    def media_root(self) -> str:
        if self.media_base_url:
            return self.media_base_url.rstrip("/")
        base = self.backend_api_url.rstrip("/")
        return base[: -len("/api")] if base.endswith("/api") else base


settings = Settings()
