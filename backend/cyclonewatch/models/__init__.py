"""Cyclone Watch data models."""

from .core import (
    ChecklistState,
    Coordinate,
    CycloneCategory,
    CycloneData,
    DashboardData,
    DashboardSnapshot,
    DistrictRisk,
    FreshnessTier,
    HolidayFactors,
    HolidayPrediction,
    HolidayProbability,
    Language,
    RiskFactor,
    RiskLevel,
    RiskSummary,
    RouteSegment,
    SavedRoute,
    SeverityColor,
    SeverityResult,
    StormSurge,
    TimeWindow,
    TravelRecommendation,
    TravelRouteAnalysis,
    Update,
    UpdateType,
)
from .errors import AppError, DashboardError, ErrorCode, ErrorType, RecoveryOption

__all__ = [
    # Upstream resources
    "Coordinate",
    "CycloneCategory",
    "CycloneData",
    "DashboardData",
    "DistrictRisk",
    "HolidayFactors",
    "HolidayPrediction",
    "HolidayProbability",
    "RiskSummary",
    "RouteSegment",
    "StormSurge",
    "TimeWindow",
    "TravelRecommendation",
    "TravelRouteAnalysis",
    "Update",
    "UpdateType",
    # Severity
    "RiskFactor",
    "RiskLevel",
    "SeverityColor",
    "SeverityResult",
    # Persisted entities
    "ChecklistState",
    "Language",
    "SavedRoute",
    # Presentation
    "DashboardSnapshot",
    "FreshnessTier",
    # Errors
    "AppError",
    "DashboardError",
    "ErrorCode",
    "ErrorType",
    "RecoveryOption",
]
