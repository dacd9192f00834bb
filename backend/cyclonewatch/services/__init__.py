"""Cyclone Watch Services.

Service layer components:
- Severity: District severity scoring and risk factor combination
- Cache: In-memory TTL cache with freshness tiers
- Rate limit: Sliding-window request limiting per resource
- Storage: Quota-bounded persistence (in-memory or Redis backend)
- Hazard API: Retrying httpx client for the upstream hazard service
- Access: Cache/rate-limit/stale-fallback decisions per resource
- Orchestrator: Concurrent refresh, health tracking, auto-refresh
- Mock feed: Synthetic upstream served through httpx.MockTransport
"""

from .access import AccessLayer
from .cache import CACHE_TTLS, CacheRecord, CacheStore
from .hazard_api import HEALTH_ENDPOINTS, HazardAPIClient, RetryConfig, create_hazard_client
from .mock_feed import MockHazardFeed
from .orchestrator import DashboardOrchestrator, score_districts
from .ratelimit import RateLimiter
from .severity import (
    SeverityCalculator,
    calculate_district_severity,
    combine_risk_factors,
    get_severity_color,
)
from .storage import InMemoryBackend, KeyValueBackend, RedisBackend, StorageManager

__all__ = [
    # Severity
    "SeverityCalculator",
    "calculate_district_severity",
    "combine_risk_factors",
    "get_severity_color",
    # Cache / rate limit
    "CACHE_TTLS",
    "CacheRecord",
    "CacheStore",
    "RateLimiter",
    # Storage
    "InMemoryBackend",
    "KeyValueBackend",
    "RedisBackend",
    "StorageManager",
    # Upstream access
    "HEALTH_ENDPOINTS",
    "AccessLayer",
    "HazardAPIClient",
    "RetryConfig",
    "create_hazard_client",
    "MockHazardFeed",
    # Orchestration
    "DashboardOrchestrator",
    "score_districts",
]
