"""Dashboard orchestrator.

Refreshes every logical resource concurrently through the access layer,
keeps the latest good value of each, re-scores districts with the severity
scorer and tracks upstream health. Owns the auto-refresh ticker.

A failed resource keeps its previous value; partial failures are logged as
warnings and never raised.
"""

import asyncio
import contextlib
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from cyclonewatch.models import (
    CycloneData,
    DashboardSnapshot,
    DistrictRisk,
    HolidayPrediction,
    RiskLevel,
    RiskSummary,
    TravelRouteAnalysis,
    Update,
)
from cyclonewatch.services.access import AccessLayer
from cyclonewatch.services.cache import CACHE_TTLS
from cyclonewatch.services.hazard_api import HEALTH_ENDPOINTS, HazardAPIClient
from cyclonewatch.services.severity import calculate_district_severity
from cyclonewatch.utils.logging import log_error

logger = logging.getLogger(__name__)

# Refreshed by refresh_all, in the order results are applied
RESOURCES = ("cyclone", "districts", "updates", "holiday", "risk_summary")

DEFAULT_REFRESH_INTERVAL = 5 * 60

# Travel analyses share one upstream endpoint and one rate-limit budget
TRAVEL_ROUTE_KEY = "travel_route"
MAX_TRAVEL_ROUTES = 50

# Representative wind speed (km/h) per wind impact level, used to score
# districts when no cyclone track is available
WIND_IMPACT_SPEEDS = {
    RiskLevel.LOW: 40.0,
    RiskLevel.MODERATE: 90.0,
    RiskLevel.HIGH: 150.0,
}


def score_districts(
    districts: list[DistrictRisk],
    cyclone_wind_kmh: float | None = None,
) -> list[DistrictRisk]:
    """Recompute each district's severity from its raw measurements."""
    scored = []
    for district in districts:
        wind = (
            cyclone_wind_kmh
            if cyclone_wind_kmh is not None
            else WIND_IMPACT_SPEEDS[district.wind_impact]
        )
        result = calculate_district_severity(
            district.rainfall_estimate,
            wind,
            district.flooding_probability,
        )
        scored.append(
            district.model_copy(
                update={"severity_score": result.score, "severity_color": result.color}
            )
        )
    return scored


class DashboardOrchestrator:
    """Coordinates resource refreshes and exposes the current snapshot.

    Args:
        client: Upstream hazard API client.
        access: Cache- and rate-limit-aware access layer.
        ttls: Cache TTL in seconds per resource; defaults to CACHE_TTLS.
        mock_mode: Report every endpoint healthy without probing.
        refresh_interval: Seconds between automatic refreshes.
        clock: Source of wall-clock time in seconds.
    """

    def __init__(
        self,
        client: HazardAPIClient,
        access: AccessLayer,
        ttls: dict[str, float] | None = None,
        mock_mode: bool = False,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._access = access
        self._ttls = {**CACHE_TTLS, **(ttls or {})}
        self._mock_mode = mock_mode
        self._refresh_interval = refresh_interval
        self._clock = clock

        self._cyclone: CycloneData | None = None
        self._districts: list[DistrictRisk] = []
        self._updates: list[Update] = []
        self._holiday: HolidayPrediction | None = None
        self._risk_summary: RiskSummary | None = None

        self._loading = False
        self._in_flight = 0
        self._error: str | None = None
        self._last_refreshed: datetime | None = None
        self._failed: list[str] = []
        self._health: dict[str, bool] = {}

        self._generation = 0
        self._applied_generation = 0
        self._task: asyncio.Task[None] | None = None

    # ── Refresh ───────────────────────────────────────────────────────

    def _fetchers(self) -> dict[str, Callable[[], Awaitable[Any]]]:
        return {
            "cyclone": self._client.get_current_cyclone,
            "districts": self._client.get_district_rainfall,
            "updates": self._client.get_updates,
            "holiday": self._client.get_holiday_prediction,
            "risk_summary": self._client.get_risk_summary,
        }

    async def refresh_all(self) -> None:
        """Fetch every resource concurrently and apply what succeeded."""
        self._generation += 1
        generation = self._generation
        self._in_flight += 1
        self._loading = True
        self._error = None

        try:
            fetchers = self._fetchers()
            results = await asyncio.gather(
                *(
                    self._access.fetch_resource(key, fetchers[key], self._ttls[key])
                    for key in RESOURCES
                ),
                return_exceptions=True,
            )

            if generation < self._applied_generation:
                logger.info(f"[REFRESH] Discarding results of superseded refresh #{generation}")
                return

            failures = []
            for key, result in zip(RESOURCES, results):
                if isinstance(result, BaseException):
                    failures.append(key)
                elif result is not None:
                    self._apply(key, result)

            self._applied_generation = generation
            self._failed = failures
            self._last_refreshed = datetime.fromtimestamp(self._clock(), tz=timezone.utc)

            if failures:
                logger.warning(
                    f"[REFRESH] {len(failures)} data fetch(es) failed ({', '.join(failures)}), "
                    "using cached data where available"
                )
        except Exception as e:
            self._error = str(e) or "Failed to fetch data"
            log_error(logger, "DashboardOrchestrator.refresh_all", e)
        finally:
            self._in_flight -= 1
            self._loading = self._in_flight > 0

    def _apply(self, key: str, value: Any) -> None:
        if key == "cyclone":
            self._cyclone = value
        elif key == "districts":
            wind = self._cyclone.wind_speed if self._cyclone is not None else None
            self._districts = score_districts(value, wind)
        elif key == "updates":
            self._updates = value
        elif key == "holiday":
            self._holiday = value
        elif key == "risk_summary":
            self._risk_summary = value

    async def analyze_travel_route(
        self, source: str, destination: str
    ) -> TravelRouteAnalysis | None:
        """Travel impact between two places, cached per route.

        All routes draw on one rate-limit budget; at most
        ``MAX_TRAVEL_ROUTES`` analyses stay cached.

        Raises:
            DashboardError: The analysis failed and none was cached.
        """
        key = f"{TRAVEL_ROUTE_KEY}:{source}:{destination}"
        self._access.cache.prune(f"{TRAVEL_ROUTE_KEY}:", MAX_TRAVEL_ROUTES - 1, exclude=key)
        return await self._access.fetch_resource(
            key,
            lambda: self._client.analyze_travel_route(source, destination),
            self._ttls[TRAVEL_ROUTE_KEY],
            limit_key=TRAVEL_ROUTE_KEY,
        )

    # ── Health ────────────────────────────────────────────────────────

    async def check_health(self) -> dict[str, bool]:
        """Probe every upstream endpoint and record the health map."""
        if self._mock_mode:
            self._health = {endpoint: True for endpoint in HEALTH_ENDPOINTS}
            return dict(self._health)

        try:
            results = await asyncio.gather(
                *(self._client.health_check(endpoint) for endpoint in HEALTH_ENDPOINTS),
                return_exceptions=True,
            )
            self._health = {
                endpoint: result is True for endpoint, result in zip(HEALTH_ENDPOINTS, results)
            }
        except Exception as e:
            log_error(logger, "DashboardOrchestrator.check_health", e)
            self._health = {endpoint: False for endpoint in HEALTH_ENDPOINTS}

        unhealthy = [endpoint for endpoint, ok in self._health.items() if not ok]
        if unhealthy:
            logger.warning(f"[HEALTH] Unhealthy endpoints: {', '.join(unhealthy)}")
        return dict(self._health)

    # ── Snapshot ──────────────────────────────────────────────────────

    @property
    def health(self) -> dict[str, bool]:
        return dict(self._health)

    def snapshot(self) -> DashboardSnapshot:
        """Latest resource values with loading/error state and freshness."""
        cache = self._access.cache
        return DashboardSnapshot(
            cyclone=self._cyclone,
            districts=list(self._districts),
            updates=list(self._updates),
            holiday_prediction=self._holiday,
            risk_summary=self._risk_summary,
            loading=self._loading,
            error=self._error,
            last_refreshed=self._last_refreshed,
            failed_resources=list(self._failed),
            freshness={key: cache.get_freshness(key) for key in RESOURCES},
            health=dict(self._health),
        )

    # ── Auto-refresh ──────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start refreshing every ``refresh_interval`` seconds."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_ticker())
        logger.info(f"[REFRESH] Auto-refresh every {self._refresh_interval:.0f}s")

    async def stop(self) -> None:
        """Cancel the auto-refresh ticker and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("[REFRESH] Auto-refresh stopped")

    async def _run_ticker(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval)
            await self.refresh_all()
