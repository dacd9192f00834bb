"""API routes for Cyclone Watch.

Read side: the dashboard snapshot assembled by the orchestrator, upstream
health, travel impact and on-demand severity scoring.

Write side: user convenience state kept by the storage manager (saved
routes, checklist progress, language preference, last viewed cyclone).

Services are built once in the application lifespan and read from
``app.state``; every response uses the ``{success, ..., error}`` envelope.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from cyclonewatch.models import (
    AppError,
    ChecklistState,
    DashboardError,
    DashboardSnapshot,
    ErrorCode,
    ErrorType,
    Language,
    RecoveryOption,
    RiskFactor,
    RiskLevel,
    SavedRoute,
    SeverityResult,
    TravelRouteAnalysis,
)
from cyclonewatch.services.orchestrator import DashboardOrchestrator
from cyclonewatch.services.severity import calculate_district_severity, combine_risk_factors
from cyclonewatch.services.storage import StorageManager

logger = logging.getLogger(__name__)

router = APIRouter()


def get_orchestrator(request: Request) -> DashboardOrchestrator:
    return request.app.state.orchestrator


def get_storage(request: Request) -> StorageManager:
    return request.app.state.storage


def _upstream_error(error: DashboardError) -> AppError:
    """Map an access-layer failure to an API error envelope."""
    if error.error_type == ErrorType.VALIDATION_ERROR:
        return AppError(
            code=ErrorCode.VALIDATION_ERROR,
            message=error.message,
            user_message="The hazard service returned unexpected data.",
        )
    if error.error_type == ErrorType.API_ERROR and error.status_code is not None and error.status_code < 500:
        return AppError(
            code=ErrorCode.API_ERROR,
            message=error.message,
            user_message="The hazard service rejected the request.",
        )
    return AppError(
        code=ErrorCode.UPSTREAM_UNAVAILABLE,
        message=error.message,
        user_message="Hazard data is unavailable right now. Please try again shortly.",
        recovery_options=[RecoveryOption(label="Retry", action="retry")],
    )


def _storage_error(operation: str) -> AppError:
    return AppError(
        code=ErrorCode.STORAGE_ERROR,
        message=f"{operation} failed",
        user_message="Your changes could not be saved on this device.",
    )


# Request/Response models
class DashboardResponse(BaseModel):
    success: bool
    dashboard: Optional[DashboardSnapshot] = None
    error: Optional[AppError] = None


class HealthResponse(BaseModel):
    success: bool
    endpoints: dict[str, bool] = Field(default_factory=dict)


class SeverityResponse(BaseModel):
    success: bool
    result: Optional[SeverityResult] = None


class CombineRiskRequest(BaseModel):
    """Weighted risk factors to combine into one score."""
    factors: list[RiskFactor] = Field(default_factory=list)


class CombineRiskResponse(BaseModel):
    success: bool
    score: float


class TravelImpactResponse(BaseModel):
    success: bool
    analysis: Optional[TravelRouteAnalysis] = None
    error: Optional[AppError] = None


class SaveRouteRequest(BaseModel):
    source: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)


class RouteResponse(BaseModel):
    success: bool
    route: Optional[SavedRoute] = None
    error: Optional[AppError] = None


class RoutesResponse(BaseModel):
    success: bool
    routes: list[SavedRoute] = Field(default_factory=list)


class ChecklistUpdateRequest(BaseModel):
    items: dict[str, bool] = Field(default_factory=dict)


class ChecklistResponse(BaseModel):
    success: bool
    checklist: Optional[ChecklistState] = None
    error: Optional[AppError] = None


class LanguageRequest(BaseModel):
    language: Language


class LanguageResponse(BaseModel):
    success: bool
    language: Optional[Language] = None
    error: Optional[AppError] = None


class LastViewedRequest(BaseModel):
    cyclone_id: str = Field(..., min_length=1)


class LastViewedResponse(BaseModel):
    success: bool
    cyclone_id: Optional[str] = None
    error: Optional[AppError] = None


class StorageSizeResponse(BaseModel):
    success: bool
    size_bytes: int
    max_bytes: int


class OperationResponse(BaseModel):
    success: bool
    error: Optional[AppError] = None


# ─── Dashboard ───

@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DashboardResponse:
    """Latest snapshot of every resource with freshness and health."""
    return DashboardResponse(success=True, dashboard=orchestrator.snapshot())


@router.post("/dashboard/refresh", response_model=DashboardResponse)
async def refresh_dashboard(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> DashboardResponse:
    """Refresh every resource now and return the resulting snapshot.

    Partial failures still succeed; failed resources keep their previous
    value and are listed in ``failed_resources``.
    """
    await orchestrator.refresh_all()
    snapshot = orchestrator.snapshot()
    if snapshot.error:
        return DashboardResponse(
            success=False,
            dashboard=snapshot,
            error=AppError(
                code=ErrorCode.API_ERROR,
                message=snapshot.error,
                user_message="Failed to refresh hazard data.",
                recovery_options=[RecoveryOption(label="Retry", action="retry")],
            ),
        )
    return DashboardResponse(success=True, dashboard=snapshot)


# ─── Health ───

@router.get("/health/endpoints", response_model=HealthResponse)
async def get_endpoint_health(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """Health map recorded by the last check."""
    return HealthResponse(success=True, endpoints=orchestrator.health)


@router.post("/health/check", response_model=HealthResponse)
async def check_endpoint_health(
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """Probe every upstream endpoint now."""
    endpoints = await orchestrator.check_health()
    return HealthResponse(success=all(endpoints.values()), endpoints=endpoints)


# ─── Severity ───

@router.get("/severity", response_model=SeverityResponse)
async def get_severity(
    rainfall: float = Query(..., description="Rainfall in mm; negatives score as zero"),
    wind: float = Query(..., description="Wind speed in km/h; negatives score as zero"),
    flooding: RiskLevel = Query(..., description="Flooding probability"),
) -> SeverityResponse:
    """Score a district from raw measurements."""
    return SeverityResponse(
        success=True,
        result=calculate_district_severity(rainfall, wind, flooding),
    )


@router.post("/severity/combine", response_model=CombineRiskResponse)
async def combine_severity(request: CombineRiskRequest) -> CombineRiskResponse:
    """Weighted average of the given risk factors."""
    return CombineRiskResponse(success=True, score=combine_risk_factors(request.factors))


# ─── Travel ───

@router.get("/travel/impact", response_model=TravelImpactResponse)
async def get_travel_impact(
    source: str = Query(..., min_length=1),
    destination: str = Query(..., min_length=1),
    orchestrator: DashboardOrchestrator = Depends(get_orchestrator),
) -> TravelImpactResponse:
    """Cyclone impact on travel between two places."""
    try:
        analysis = await orchestrator.analyze_travel_route(source, destination)
    except DashboardError as e:
        return TravelImpactResponse(success=False, error=_upstream_error(e))

    if analysis is None:
        return TravelImpactResponse(
            success=False,
            error=AppError(
                code=ErrorCode.UPSTREAM_UNAVAILABLE,
                message=f"Request limit reached for {source} -> {destination}",
                user_message="Too many route checks. Please try again later.",
            ),
        )
    return TravelImpactResponse(success=True, analysis=analysis)


# ─── Saved routes ───

@router.get("/routes", response_model=RoutesResponse)
async def list_routes(storage: StorageManager = Depends(get_storage)) -> RoutesResponse:
    return RoutesResponse(success=True, routes=storage.get_saved_routes())


@router.post("/routes", response_model=RouteResponse)
async def save_route(
    request: SaveRouteRequest,
    storage: StorageManager = Depends(get_storage),
) -> RouteResponse:
    """Save a route; saving the same endpoints again replaces it."""
    route = SavedRoute(
        id=f"route_{uuid4().hex[:12]}",
        source=request.source.strip(),
        destination=request.destination.strip(),
        saved_at=datetime.now(timezone.utc),
    )
    if not storage.save_route(route):
        return RouteResponse(success=False, error=_storage_error("Saving route"))
    logger.info(f"[ROUTES] Saved {route.source} -> {route.destination}")
    return RouteResponse(success=True, route=route)


@router.delete("/routes/{route_id}", response_model=OperationResponse)
async def delete_route(
    route_id: str,
    storage: StorageManager = Depends(get_storage),
) -> OperationResponse:
    if not storage.delete_route(route_id):
        return OperationResponse(
            success=False,
            error=AppError(
                code=ErrorCode.NOT_FOUND,
                message=f"No saved route with id {route_id}",
                user_message="Route not found.",
            ),
        )
    return OperationResponse(success=True)


# ─── Checklist ───

@router.get("/checklist", response_model=ChecklistResponse)
async def get_checklist(storage: StorageManager = Depends(get_storage)) -> ChecklistResponse:
    return ChecklistResponse(success=True, checklist=storage.get_checklist_state())


@router.put("/checklist", response_model=ChecklistResponse)
async def update_checklist(
    request: ChecklistUpdateRequest,
    storage: StorageManager = Depends(get_storage),
) -> ChecklistResponse:
    state = ChecklistState(items=request.items, last_updated=datetime.now(timezone.utc))
    if not storage.save_checklist_state(state):
        return ChecklistResponse(success=False, error=_storage_error("Saving checklist"))
    return ChecklistResponse(success=True, checklist=state)


# ─── Preferences ───

@router.get("/preferences/language", response_model=LanguageResponse)
async def get_language(storage: StorageManager = Depends(get_storage)) -> LanguageResponse:
    """Saved display language, or null when none was chosen."""
    return LanguageResponse(success=True, language=storage.get_language_preference())


@router.put("/preferences/language", response_model=LanguageResponse)
async def set_language(
    request: LanguageRequest,
    storage: StorageManager = Depends(get_storage),
) -> LanguageResponse:
    if not storage.save_language_preference(request.language):
        return LanguageResponse(success=False, error=_storage_error("Saving language"))
    return LanguageResponse(success=True, language=request.language)


@router.get("/cyclone/last-viewed", response_model=LastViewedResponse)
async def get_last_viewed(storage: StorageManager = Depends(get_storage)) -> LastViewedResponse:
    return LastViewedResponse(success=True, cyclone_id=storage.get_last_cyclone())


@router.put("/cyclone/last-viewed", response_model=LastViewedResponse)
async def set_last_viewed(
    request: LastViewedRequest,
    storage: StorageManager = Depends(get_storage),
) -> LastViewedResponse:
    if not storage.save_last_cyclone(request.cyclone_id):
        return LastViewedResponse(success=False, error=_storage_error("Saving last viewed cyclone"))
    return LastViewedResponse(success=True, cyclone_id=request.cyclone_id)


# ─── Storage ───

@router.get("/storage/size", response_model=StorageSizeResponse)
async def get_storage_size(storage: StorageManager = Depends(get_storage)) -> StorageSizeResponse:
    return StorageSizeResponse(
        success=True,
        size_bytes=storage.get_total_size(),
        max_bytes=storage.max_size_bytes,
    )


@router.delete("/storage", response_model=OperationResponse)
async def clear_storage(storage: StorageManager = Depends(get_storage)) -> OperationResponse:
    """Delete every stored record, the language preference included."""
    if not storage.clear_all():
        return OperationResponse(success=False, error=_storage_error("Clearing storage"))
    return OperationResponse(success=True)
