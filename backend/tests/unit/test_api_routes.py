"""Tests for the HTTP API.

The app runs in mock mode, so the whole upstream path is served by the
synthetic feed through httpx.MockTransport.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from cyclonewatch.config import Settings
from cyclonewatch.main import create_app
from cyclonewatch.services.hazard_api import HazardAPIClient
from cyclonewatch.services.mock_feed import MockHazardFeed
from cyclonewatch.services.storage import InMemoryBackend


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def settings() -> Settings:
    return Settings(enable_mock_data=True, auto_refresh=False)


@pytest.fixture
def api(settings):
    app = create_app(settings=settings, backend=InMemoryBackend())
    with TestClient(app) as client:
        yield client


class TestHealth:
    def test_liveness(self, api) -> None:
        assert api.get("/health").json() == {"status": "healthy"}

    def test_endpoint_health_in_mock_mode(self, api) -> None:
        body = api.get("/api/health/endpoints").json()
        assert body["success"] is True
        assert len(body["endpoints"]) == 6
        assert all(body["endpoints"].values())

    def test_check(self, api) -> None:
        assert api.post("/api/health/check").json()["success"] is True


class TestDashboard:
    def test_snapshot_after_startup_refresh(self, api) -> None:
        body = api.get("/api/dashboard").json()
        assert body["success"] is True
        dashboard = body["dashboard"]
        assert dashboard["cyclone"]["windSpeed"] >= 0
        assert len(dashboard["districts"]) == 10
        assert len(dashboard["updates"]) == 10
        assert dashboard["error"] is None
        assert dashboard["freshness"]["cyclone"] == "fresh"

    def test_refresh(self, api) -> None:
        body = api.post("/api/dashboard/refresh").json()
        assert body["success"] is True
        assert body["dashboard"]["failed_resources"] == []


class TestSeverity:
    def test_score(self, api) -> None:
        body = api.get("/api/severity", params={"rainfall": 0, "wind": 0, "flooding": "low"}).json()
        assert body["result"] == {"score": 0.6, "color": "yellow", "level": "low"}

    def test_negative_inputs_clamped(self, api) -> None:
        body = api.get("/api/severity", params={"rainfall": -50, "wind": -10, "flooding": "low"}).json()
        assert body["result"] == {"score": 0.6, "color": "yellow", "level": "low"}

    def test_invalid_query(self, api) -> None:
        response = api.get("/api/severity", params={"rainfall": "heavy", "wind": 0, "flooding": "low"})
        assert response.status_code == 422

    def test_missing_query(self, api) -> None:
        response = api.get("/api/severity", params={"wind": 0, "flooding": "low"})
        assert response.status_code == 422

    def test_combine(self, api) -> None:
        body = api.post(
            "/api/severity/combine",
            json={
                "factors": [
                    {"type": "rainfall", "value": 8, "weight": 2},
                    {"type": "wind", "value": 4, "weight": 2},
                ]
            },
        ).json()
        assert body == {"success": True, "score": 6.0}


class TestTravel:
    def test_impact(self, api) -> None:
        body = api.get("/api/travel/impact", params={"source": "Chennai", "destination": "Madurai"}).json()
        assert body["success"] is True
        assert body["analysis"]["source"] == "Chennai"

    def test_missing_destination(self, api) -> None:
        assert api.get("/api/travel/impact", params={"source": "Chennai"}).status_code == 422

    def test_upstream_failure(self) -> None:
        feed = MockHazardFeed(seed=1)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/travel/impact"):
                return httpx.Response(503)
            return feed.handle(request)

        client = HazardAPIClient(
            base_url="http://hazard.test/api",
            transport=httpx.MockTransport(handler),
            sleep=no_sleep,
        )
        app = create_app(
            settings=Settings(auto_refresh=False),
            client=client,
            backend=InMemoryBackend(),
        )
        with TestClient(app) as api:
            body = api.get(
                "/api/travel/impact", params={"source": "Chennai", "destination": "Madurai"}
            ).json()

        assert body["success"] is False
        assert body["error"]["code"] == "UPSTREAM_UNAVAILABLE"
        assert body["error"]["recovery_options"][0]["action"] == "retry"


class TestSavedRoutes:
    def test_save_list_delete(self, api) -> None:
        saved = api.post("/api/routes", json={"source": "Chennai", "destination": "Madurai"}).json()
        assert saved["success"] is True
        route_id = saved["route"]["id"]
        assert route_id.startswith("route_")

        routes = api.get("/api/routes").json()["routes"]
        assert [r["id"] for r in routes] == [route_id]

        assert api.delete(f"/api/routes/{route_id}").json()["success"] is True
        assert api.get("/api/routes").json()["routes"] == []

    def test_resave_replaces(self, api) -> None:
        api.post("/api/routes", json={"source": "A", "destination": "B"})
        second = api.post("/api/routes", json={"source": "A", "destination": "B"}).json()
        routes = api.get("/api/routes").json()["routes"]
        assert [r["id"] for r in routes] == [second["route"]["id"]]

    def test_delete_unknown(self, api) -> None:
        body = api.delete("/api/routes/route_missing").json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"

    def test_blank_source_rejected(self, api) -> None:
        assert api.post("/api/routes", json={"source": "", "destination": "B"}).status_code == 422

    def test_storage_failure(self, settings) -> None:
        app = create_app(settings=settings, backend=InMemoryBackend(capacity_bytes=16))
        with TestClient(app) as api:
            body = api.post("/api/routes", json={"source": "A", "destination": "B"}).json()
        assert body["success"] is False
        assert body["error"]["code"] == "STORAGE_ERROR"


class TestUserState:
    def test_checklist(self, api) -> None:
        assert api.get("/api/checklist").json()["checklist"]["items"] == {}
        api.put("/api/checklist", json={"items": {"water": True, "torch": False}})
        assert api.get("/api/checklist").json()["checklist"]["items"] == {"water": True, "torch": False}

    def test_language(self, api) -> None:
        assert api.get("/api/preferences/language").json()["language"] is None
        assert api.put("/api/preferences/language", json={"language": "ta"}).json()["success"] is True
        assert api.get("/api/preferences/language").json()["language"] == "ta"

    def test_unsupported_language(self, api) -> None:
        assert api.put("/api/preferences/language", json={"language": "fr"}).status_code == 422

    def test_last_viewed(self, api) -> None:
        api.put("/api/cyclone/last-viewed", json={"cyclone_id": "CYC-1"})
        assert api.get("/api/cyclone/last-viewed").json()["cyclone_id"] == "CYC-1"

    def test_storage_size_and_clear(self, api) -> None:
        api.put("/api/preferences/language", json={"language": "en"})
        size = api.get("/api/storage/size").json()
        assert size["size_bytes"] > 0
        assert size["max_bytes"] == 5 * 1024 * 1024

        assert api.delete("/api/storage").json()["success"] is True
        assert api.get("/api/storage/size").json()["size_bytes"] == 0
        assert api.get("/api/preferences/language").json()["language"] is None
