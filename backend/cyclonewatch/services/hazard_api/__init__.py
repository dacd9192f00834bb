"""Retrying HTTP client for the upstream hazard data service."""

from .service import (
    ENDPOINTS,
    HEALTH_ENDPOINTS,
    HazardAPIClient,
    RetryConfig,
    create_hazard_client,
)

__all__ = [
    "ENDPOINTS",
    "HEALTH_ENDPOINTS",
    "HazardAPIClient",
    "RetryConfig",
    "create_hazard_client",
]
