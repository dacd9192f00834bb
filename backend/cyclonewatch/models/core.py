"""Core data models for Cyclone Watch.

This module contains the Pydantic models for the upstream hazard resources
(cyclone track, district risk, advisories), the user-owned persisted
entities (saved routes, checklist state) and the computed severity result.

Upstream payloads use camelCase keys on the wire; the models expose
snake_case attributes and accept either form.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RiskLevel(str, Enum):
    """Ordinal hazard level used by upstream data and the severity scorer."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class SeverityColor(str, Enum):
    """Color tier for a severity score."""

    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


class FreshnessTier(str, Enum):
    """UI-facing age classification of cached data.

    Derived from the age of a cache record, never stored. Independent of
    the record's TTL.
    """

    FRESH = "fresh"
    STALE_YELLOW = "stale-yellow"
    STALE_ORANGE = "stale-orange"
    STALE_RED = "stale-red"


class CycloneCategory(str, Enum):
    DEPRESSION = "depression"
    CYCLONE = "cyclone"
    SEVERE_CYCLONE = "severe-cyclone"
    SUPER_CYCLONE = "super-cyclone"


class UpdateType(str, Enum):
    IMD_BULLETIN = "imd-bulletin"
    RAINFALL_ALERT = "rainfall-alert"
    GOVT_ANNOUNCEMENT = "govt-announcement"
    SERVICE_ADVISORY = "service-advisory"


class HolidayProbability(str, Enum):
    LOW_RISK = "low-risk"
    POSSIBLE = "possible"
    LIKELY = "likely"


class TravelRecommendation(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    AVOID_TRAVEL = "avoid-travel"


Language = Literal["en", "ta"]


class WireModel(BaseModel):
    """Base for models exchanged with the upstream feed (camelCase JSON)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinate(WireModel):
    """Geographic coordinates with validation."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class TimeWindow(WireModel):
    start: datetime
    end: datetime
    severity: RiskLevel


class RouteSegment(WireModel):
    district_id: str
    district_name: str
    risk_level: RiskLevel


class CycloneData(WireModel):
    """Current cyclone track and intensity."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    pathway: list[Coordinate] = Field(..., min_length=1)
    current_position: Coordinate
    wind_speed: float = Field(..., ge=0, description="Sustained wind in km/h")
    pressure: float = Field(..., ge=0, description="Central pressure in hPa")
    category: CycloneCategory
    last_updated: datetime

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class StormSurge(WireModel):
    risk: RiskLevel
    water_level_rise: float = Field(..., description="Water level rise in meters")


class DistrictRisk(WireModel):
    """Hazard measurements and severity for one district."""

    district_id: str = Field(..., min_length=1)
    district_name: str = Field(..., min_length=1)
    rainfall_estimate: float = Field(..., ge=0, description="Rainfall in mm")
    flooding_probability: RiskLevel
    waterlogging_risk: RiskLevel
    wind_impact: RiskLevel
    severity_score: float = Field(..., ge=0, le=10)
    severity_color: SeverityColor
    storm_surge: Optional[StormSurge] = None
    landslide_risk: Optional[RiskLevel] = None
    is_coastal: Optional[bool] = None
    is_hilly: Optional[bool] = None


class Update(WireModel):
    """An advisory, bulletin or announcement."""

    id: str
    type: UpdateType
    title: str
    content: str
    source: str
    timestamp: datetime


class HolidayFactors(WireModel):
    rainfall_intensity: float
    wind_speed: float
    alert_level: str


class HolidayPrediction(WireModel):
    date: datetime
    probability: HolidayProbability
    confidence: float = Field(..., ge=0, le=100)
    factors: HolidayFactors


class TravelRouteAnalysis(WireModel):
    source: str
    destination: str
    affected_districts: list[str]
    max_rainfall: float = Field(..., ge=0)
    disruption_windows: list[TimeWindow]
    recommendation: TravelRecommendation
    risk_segments: list[RouteSegment]


class RiskSummary(WireModel):
    overall_severity: float = Field(..., ge=0, le=10)
    affected_districts: int = Field(..., ge=0)
    high_risk_districts: list[str]
    active_alerts: int = Field(..., ge=0)


class DashboardData(WireModel):
    """Aggregate payload of the ``/dashboard/full`` endpoint."""

    cyclone: CycloneData
    districts: list[DistrictRisk]
    holiday_prediction: HolidayPrediction
    updates: list[Update]
    risk_summary: RiskSummary


class SeverityResult(BaseModel):
    """Computed district severity. Never persisted."""

    score: float = Field(..., ge=0, le=10)
    color: SeverityColor
    level: RiskLevel


class RiskFactor(BaseModel):
    """One weighted input to :func:`combine_risk_factors`."""

    type: Literal["rainfall", "wind", "flooding"]
    value: float = Field(..., ge=0, le=10)
    weight: float = Field(..., gt=0)


class SavedRoute(WireModel):
    """A travel route the user saved, unique per (source, destination)."""

    id: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    saved_at: datetime


class ChecklistState(WireModel):
    """Preparation checklist progress keyed by checklist item id."""

    items: dict[str, bool] = Field(default_factory=dict)
    last_updated: datetime


class DashboardSnapshot(BaseModel):
    """Read-only view of the latest resources for the presentation layer."""

    cyclone: Optional[CycloneData] = None
    districts: list[DistrictRisk] = Field(default_factory=list)
    updates: list[Update] = Field(default_factory=list)
    holiday_prediction: Optional[HolidayPrediction] = None
    risk_summary: Optional[RiskSummary] = None
    loading: bool = False
    error: Optional[str] = None
    last_refreshed: Optional[datetime] = None
    failed_resources: list[str] = Field(
        default_factory=list, description="Resources whose last refresh failed"
    )
    freshness: dict[str, FreshnessTier] = Field(default_factory=dict)
    health: dict[str, bool] = Field(default_factory=dict)
