"""District severity scoring.

Score = rainfall_normalized * 0.4 + wind_normalized * 0.3 + flooding_score * 0.3

Normalization maps rainfall 0-500 mm and wind 0-200 km/h linearly onto
0-10 (clamped). Flooding risk maps to a fixed ordinal (low=2, moderate=5,
high=9). The final score is clamped to 0-10 and rounded to one decimal;
its color is yellow up to 3.9, orange up to 6.9 and red above.

All functions are pure and never raise for finite numeric input.
"""

import math
from typing import Iterable

from cyclonewatch.models import RiskFactor, RiskLevel, SeverityColor, SeverityResult

RAINFALL_MAX_MM = 500.0
WIND_SPEED_MAX_KMH = 200.0
SCORE_MAX = 10.0

WEIGHTS = {
    "rainfall": 0.4,
    "wind": 0.3,
    "flooding": 0.3,
}

RISK_LEVEL_SCORES: dict[RiskLevel, float] = {
    RiskLevel.LOW: 2.0,
    RiskLevel.MODERATE: 5.0,
    RiskLevel.HIGH: 9.0,
}

YELLOW_MAX = 3.9
ORANGE_MAX = 6.9


def _round_one_decimal(value: float) -> float:
    # Half-up, so 3.95 -> 4.0 rather than banker's rounding.
    return math.floor(value * 10 + 0.5) / 10


def _clamp_score(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(SCORE_MAX, value))


def _normalize(value: float, domain_max: float) -> float:
    if math.isnan(value) or value <= 0:
        return 0.0
    if value >= domain_max:
        return SCORE_MAX
    return value / domain_max * SCORE_MAX


def normalize_rainfall(rainfall_mm: float) -> float:
    """Map rainfall in mm onto the 0-10 scale."""
    return _normalize(rainfall_mm, RAINFALL_MAX_MM)


def normalize_wind_speed(wind_kmh: float) -> float:
    """Map wind speed in km/h onto the 0-10 scale."""
    return _normalize(wind_kmh, WIND_SPEED_MAX_KMH)


def risk_level_to_score(risk_level: RiskLevel | str) -> float:
    """Ordinal score of a flooding risk level."""
    return RISK_LEVEL_SCORES[RiskLevel(risk_level)]


def get_severity_color(score: float) -> SeverityColor:
    """Color tier for a score; out-of-range scores are clamped first."""
    if score < 0:
        return SeverityColor.YELLOW
    if score > SCORE_MAX:
        return SeverityColor.RED
    if score <= YELLOW_MAX:
        return SeverityColor.YELLOW
    if score <= ORANGE_MAX:
        return SeverityColor.ORANGE
    return SeverityColor.RED


def _score_to_risk_level(score: float) -> RiskLevel:
    if score <= YELLOW_MAX:
        return RiskLevel.LOW
    if score <= ORANGE_MAX:
        return RiskLevel.MODERATE
    return RiskLevel.HIGH


def calculate_district_severity(
    rainfall_mm: float,
    wind_kmh: float,
    flooding_risk: RiskLevel | str,
) -> SeverityResult:
    """Score a district from its hazard measurements.

    Args:
        rainfall_mm: Estimated rainfall in millimetres.
        wind_kmh: Wind speed in km/h.
        flooding_risk: Flooding probability as a risk level.

    Returns:
        SeverityResult with score in [0, 10], color tier and level.

    Example:
        >>> calculate_district_severity(0, 0, "low").score
        0.6
    """
    score = (
        normalize_rainfall(rainfall_mm) * WEIGHTS["rainfall"]
        + normalize_wind_speed(wind_kmh) * WEIGHTS["wind"]
        + risk_level_to_score(flooding_risk) * WEIGHTS["flooding"]
    )
    rounded = _round_one_decimal(_clamp_score(score))
    return SeverityResult(
        score=rounded,
        color=get_severity_color(rounded),
        level=_score_to_risk_level(rounded),
    )


def combine_risk_factors(factors: Iterable[RiskFactor]) -> float:
    """Weighted average of arbitrary risk factors.

    Returns 0 for an empty list or when the weights sum to zero.
    """
    factors = list(factors)
    if not factors:
        return 0.0

    total_weight = sum(factor.weight for factor in factors)
    if total_weight == 0:
        return 0.0

    weighted_sum = sum(factor.value * factor.weight for factor in factors)
    return _round_one_decimal(_clamp_score(weighted_sum / total_weight))


class SeverityCalculator:
    """Stateless facade over the scoring functions."""

    calculate_district_severity = staticmethod(calculate_district_severity)
    combine_risk_factors = staticmethod(combine_risk_factors)
    get_severity_color = staticmethod(get_severity_color)
    normalize_rainfall = staticmethod(normalize_rainfall)
    normalize_wind_speed = staticmethod(normalize_wind_speed)
    risk_level_to_score = staticmethod(risk_level_to_score)
