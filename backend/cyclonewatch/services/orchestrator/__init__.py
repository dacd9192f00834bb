"""Concurrent refresh, health tracking and auto-refresh."""

from .service import (
    DEFAULT_REFRESH_INTERVAL,
    MAX_TRAVEL_ROUTES,
    RESOURCES,
    TRAVEL_ROUTE_KEY,
    WIND_IMPACT_SPEEDS,
    DashboardOrchestrator,
    score_districts,
)

__all__ = [
    "DEFAULT_REFRESH_INTERVAL",
    "MAX_TRAVEL_ROUTES",
    "RESOURCES",
    "TRAVEL_ROUTE_KEY",
    "WIND_IMPACT_SPEEDS",
    "DashboardOrchestrator",
    "score_districts",
]
