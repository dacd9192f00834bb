"""HTTP client for the upstream hazard data service.

Architecture:
- Shared httpx client with connection pooling
- Every request races an explicit timeout (default 10s)
- Retry with exponential backoff on network failures and HTTP 5xx
- HTTP 4xx and malformed payloads fail immediately, without retry
- Payloads are validated against the resource's Pydantic schema before
  they are returned

All failures are logged as structured records and raised as
``DashboardError`` with the matching ``ErrorType``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from cyclonewatch.config import Settings
from cyclonewatch.models import (
    CycloneData,
    DashboardData,
    DashboardError,
    DistrictRisk,
    ErrorType,
    HolidayPrediction,
    RiskSummary,
    TravelRouteAnalysis,
    Update,
)
from cyclonewatch.utils.logging import log_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENDPOINTS = {
    "cyclone": "/cyclone/current",
    "districts": "/rainfall/districts",
    "govt_alerts": "/alerts/govt",
    "imd_bulletins": "/bulletins/imd",
    "holiday": "/holiday/prediction",
    "risk_summary": "/risk/summary",
    "travel_impact": "/travel/impact",
    "dashboard": "/dashboard/full",
}

# Endpoints probed by health checks
HEALTH_ENDPOINTS = [
    ENDPOINTS["cyclone"],
    ENDPOINTS["districts"],
    ENDPOINTS["govt_alerts"],
    ENDPOINTS["imd_bulletins"],
    ENDPOINTS["holiday"],
    ENDPOINTS["risk_summary"],
]

_CYCLONE = TypeAdapter(CycloneData)
_DISTRICTS = TypeAdapter(list[DistrictRisk])
_UPDATES = TypeAdapter(list[Update])
_HOLIDAY = TypeAdapter(HolidayPrediction)
_RISK_SUMMARY = TypeAdapter(RiskSummary)
_TRAVEL = TypeAdapter(TravelRouteAnalysis)
_DASHBOARD = TypeAdapter(DashboardData)


@dataclass(frozen=True)
class RetryConfig:
    """Exponential backoff policy. Delays are in seconds."""

    max_retries: int = 3
    initial_delay: float = 2.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt + 1`` (attempt is 0-based)."""
        return min(self.max_delay, self.initial_delay * self.backoff_multiplier**attempt)


class HazardAPIClient:
    """REST client for the hazard data service.

    Args:
        base_url: Service root, e.g. ``http://localhost:3000/api``.
        timeout: Per-request timeout in seconds.
        retry_config: Backoff policy for retryable failures.
        transport: Optional httpx transport (``httpx.MockTransport`` in
            tests and mock mode).
        sleep: Coroutine used between retries.
    """

    HEADERS = {
        "User-Agent": "CycloneWatch/1.0",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry = retry_config or RetryConfig()
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self.HEADERS,
                limits=httpx.Limits(max_connections=8, max_keepalive_connections=4),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # ── Resources ─────────────────────────────────────────────────────

    async def get_current_cyclone(self) -> CycloneData:
        return await self.fetch_with_retry(ENDPOINTS["cyclone"], _CYCLONE)

    async def get_district_rainfall(self) -> list[DistrictRisk]:
        return await self.fetch_with_retry(ENDPOINTS["districts"], _DISTRICTS)

    async def get_government_alerts(self) -> list[Update]:
        return await self.fetch_with_retry(ENDPOINTS["govt_alerts"], _UPDATES)

    async def get_imd_bulletins(self) -> list[Update]:
        return await self.fetch_with_retry(ENDPOINTS["imd_bulletins"], _UPDATES)

    async def get_updates(self) -> list[Update]:
        """Government alerts followed by IMD bulletins."""
        alerts, bulletins = await asyncio.gather(
            self.get_government_alerts(),
            self.get_imd_bulletins(),
        )
        return [*alerts, *bulletins]

    async def get_holiday_prediction(self) -> HolidayPrediction:
        return await self.fetch_with_retry(ENDPOINTS["holiday"], _HOLIDAY)

    async def get_risk_summary(self) -> RiskSummary:
        return await self.fetch_with_retry(ENDPOINTS["risk_summary"], _RISK_SUMMARY)

    async def analyze_travel_route(self, source: str, destination: str) -> TravelRouteAnalysis:
        params = {"source": source, "destination": destination}
        return await self.fetch_with_retry(ENDPOINTS["travel_impact"], _TRAVEL, params=params)

    async def get_full_dashboard(self) -> DashboardData:
        return await self.fetch_with_retry(ENDPOINTS["dashboard"], _DASHBOARD)

    async def health_check(self, endpoint: str) -> bool:
        """Probe ``{endpoint}/health``. Never raises."""
        try:
            response = await self._request(f"{endpoint}/health")
            return response.is_success
        except (httpx.TransportError, asyncio.TimeoutError) as e:
            log_error(logger, "HazardAPIClient.health_check", e, endpoint, level=logging.WARNING)
            return False

    # ── Transport ─────────────────────────────────────────────────────

    async def _request(self, path: str, params: dict[str, str] | None = None) -> httpx.Response:
        client = self._get_client()
        return await asyncio.wait_for(client.get(path, params=params), timeout=self._timeout)

    async def fetch_with_retry(
        self,
        path: str,
        adapter: TypeAdapter[T],
        params: dict[str, str] | None = None,
    ) -> T:
        """GET ``path`` and validate the body, retrying transient failures.

        Raises:
            DashboardError: NETWORK_ERROR once retries are exhausted on
                network failures, API_ERROR for HTTP errors, or
                VALIDATION_ERROR for malformed payloads.
        """
        max_retries = self._retry.max_retries
        attempt = 0

        while True:
            try:
                response = await self._request(path, params)
            except (httpx.TransportError, asyncio.TimeoutError) as e:
                log_error(logger, "HazardAPIClient.fetch", e, path)
                error = DashboardError(
                    ErrorType.NETWORK_ERROR,
                    f"Network request failed after {attempt} retries: {path} - {str(e) or type(e).__name__}",
                    retryable=True,
                )
            else:
                status = response.status_code
                if status >= 500:
                    log_error(logger, "HazardAPIClient.fetch", f"HTTP {status}", path)
                    error = DashboardError(
                        ErrorType.API_ERROR,
                        f"API request failed with status {status}: {path}",
                        retryable=True,
                        status_code=status,
                    )
                elif not response.is_success:
                    error = DashboardError(
                        ErrorType.API_ERROR,
                        f"API request failed with status {status}: {path}",
                        retryable=False,
                        status_code=status,
                    )
                    log_error(logger, "HazardAPIClient.fetch", error, path)
                    raise error
                else:
                    return self._parse(response, path, adapter)

            if attempt >= max_retries:
                raise error

            delay = self._retry.delay_for(attempt)
            logger.info(f"[API] Retry {attempt + 1}/{max_retries} for {path} in {delay:.1f}s")
            await self._sleep(delay)
            attempt += 1

    def _parse(self, response: httpx.Response, path: str, adapter: TypeAdapter[T]) -> T:
        """Decode and validate a successful response body."""
        try:
            data = response.json()
        except ValueError as e:
            raise self._validation_error(path, f"body is not JSON ({e})") from e

        if data is None:
            raise self._validation_error(path, "data is null or undefined")

        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise self._validation_error(path, f"{e.error_count()} schema error(s): {e}") from e

    def _validation_error(self, path: str, reason: str) -> DashboardError:
        error = DashboardError(
            ErrorType.VALIDATION_ERROR,
            f"Invalid response from {path}: {reason}",
            retryable=False,
        )
        log_error(logger, "HazardAPIClient.validate", error, path)
        return error


def create_hazard_client(settings: Settings) -> HazardAPIClient:
    """Create the API client for ``settings``.

    In mock mode, requests are answered by the synthetic hazard feed
    instead of the network.
    """
    transport: httpx.AsyncBaseTransport | None = None
    if settings.enable_mock_data:
        from cyclonewatch.services.mock_feed import MockHazardFeed

        transport = httpx.MockTransport(MockHazardFeed().handle)
        logger.info("[API] Mock data enabled, serving synthetic hazard feed")

    return HazardAPIClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        transport=transport,
    )
