"""Environment configuration.

Values come from the process environment (and a ``.env`` file when present).
Malformed numeric values fall back to their defaults with a warning.
"""

import logging
import math
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_API_BASE_URL = "http://localhost:3000/api"


def _get_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


def _get_number(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        parsed = 0.0
    if not math.isfinite(parsed) or parsed <= 0:
        logger.warning(f"[CONFIG] Invalid number for {key}={value!r}, using {default}")
        return default
    return parsed


class Settings(BaseModel):
    """Runtime settings for the hazard data engine."""

    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    enable_mock_data: bool = False
    cache_enabled: bool = True
    cache_ttl_minutes: float = Field(default=5, gt=0)
    log_level: str = "info"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    refresh_interval_seconds: float = Field(default=300.0, gt=0)
    auto_refresh: bool = True
    redis_url: str | None = None

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_minutes * 60


def load_settings() -> Settings:
    """Build settings from environment variables."""
    settings = Settings(
        api_base_url=os.getenv("API_BASE_URL") or DEFAULT_API_BASE_URL,
        enable_mock_data=_get_bool("ENABLE_MOCK_DATA", False),
        cache_enabled=_get_bool("CACHE_ENABLED", True),
        cache_ttl_minutes=_get_number("CACHE_TTL_MINUTES", 5),
        log_level=os.getenv("LOG_LEVEL", "info"),
        request_timeout_seconds=_get_number("REQUEST_TIMEOUT_SECONDS", 10.0),
        refresh_interval_seconds=_get_number("REFRESH_INTERVAL_SECONDS", 300.0),
        auto_refresh=_get_bool("AUTO_REFRESH", True),
        redis_url=os.getenv("REDIS_URL") or None,
    )
    if settings.log_level.lower() == "debug":
        logger.debug(f"[CONFIG] {settings.model_dump()}")
    return settings
