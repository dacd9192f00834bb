"""Severity scoring for district hazard measurements."""

from .service import (
    SeverityCalculator,
    calculate_district_severity,
    combine_risk_factors,
    get_severity_color,
    normalize_rainfall,
    normalize_wind_speed,
    risk_level_to_score,
)

__all__ = [
    "SeverityCalculator",
    "calculate_district_severity",
    "combine_risk_factors",
    "get_severity_color",
    "normalize_rainfall",
    "normalize_wind_speed",
    "risk_level_to_score",
]
