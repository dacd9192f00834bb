"""Sliding-window rate limiting per endpoint key."""

from .service import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_SECONDS, RateLimiter

__all__ = ["DEFAULT_MAX_REQUESTS", "DEFAULT_WINDOW_SECONDS", "RateLimiter"]
