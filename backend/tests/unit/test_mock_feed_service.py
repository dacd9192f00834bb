"""Unit tests for the synthetic hazard feed."""

import httpx
import pytest

from cyclonewatch.models import (
    CycloneData,
    DashboardData,
    DistrictRisk,
    HolidayPrediction,
    TravelRouteAnalysis,
    Update,
)
from cyclonewatch.services.mock_feed import DISTRICTS, MockHazardFeed
from cyclonewatch.services.mock_feed.service import cyclone_category


def get(feed: MockHazardFeed, path: str, **params) -> httpx.Response:
    return feed.handle(httpx.Request("GET", f"http://hazard.test/api{path}", params=params))


class TestGenerators:
    """Generated payloads match the upstream schemas."""

    def test_cyclone(self) -> None:
        cyclone = CycloneData.model_validate(MockHazardFeed(severity="high", seed=1).cyclone())
        assert 88 <= cyclone.wind_speed <= 118
        assert len(cyclone.pathway) >= 5

    def test_districts(self) -> None:
        districts = [DistrictRisk.model_validate(d) for d in MockHazardFeed(seed=2).districts()]
        assert [d.district_id for d in districts] == [d["id"] for d in DISTRICTS]

    def test_updates_filtered_by_type(self) -> None:
        updates = [
            Update.model_validate(u)
            for u in MockHazardFeed(seed=3).updates(6, types=("imd-bulletin",))
        ]
        assert {u.type.value for u in updates} == {"imd-bulletin"}
        assert updates == sorted(updates, key=lambda u: u.timestamp, reverse=True)

    def test_holiday_prediction(self) -> None:
        prediction = HolidayPrediction.model_validate(MockHazardFeed(severity="low", seed=4).holiday_prediction())
        assert prediction.probability.value == "low-risk"

    def test_route_analysis(self) -> None:
        analysis = TravelRouteAnalysis.model_validate(MockHazardFeed(seed=5).route_analysis("Chennai", "Salem"))
        assert analysis.source == "Chennai"
        assert len(analysis.risk_segments) == len(analysis.affected_districts)

    def test_risk_summary_reports_worst_district(self) -> None:
        feed = MockHazardFeed(seed=7)
        districts = feed.districts()
        districts[0]["severityScore"] = 9.4
        districts[1]["severityScore"] = 1.2
        summary = feed.risk_summary(districts)
        assert summary["overallSeverity"] == max(d["severityScore"] for d in districts)
        assert summary["overallSeverity"] >= 9.4

    def test_risk_summary_empty(self) -> None:
        assert MockHazardFeed(seed=7).risk_summary([])["overallSeverity"] == 0

    def test_dashboard(self) -> None:
        DashboardData.model_validate(MockHazardFeed(seed=6).dashboard())

    def test_seed_is_reproducible(self) -> None:
        assert MockHazardFeed(seed=9).districts() == MockHazardFeed(seed=9).districts()

    def test_unknown_severity(self) -> None:
        with pytest.raises(ValueError):
            MockHazardFeed(severity="apocalyptic")

    @pytest.mark.parametrize(
        "wind,category",
        [(40, "depression"), (62, "cyclone"), (88, "severe-cyclone"), (118, "super-cyclone")],
    )
    def test_cyclone_category(self, wind, category) -> None:
        assert cyclone_category(wind) == category


class TestHandle:
    """Tests for the MockTransport handler."""

    def test_health(self) -> None:
        response = get(MockHazardFeed(), "/risk/summary/health")
        assert response.status_code == 200

    def test_resource(self) -> None:
        response = get(MockHazardFeed(seed=1), "/rainfall/districts")
        assert response.status_code == 200
        assert len(response.json()) == 10

    def test_travel_requires_params(self) -> None:
        assert get(MockHazardFeed(), "/travel/impact", source="Chennai").status_code == 400

    def test_travel(self) -> None:
        response = get(MockHazardFeed(), "/travel/impact", source="Chennai", destination="Vellore")
        assert response.json()["destination"] == "Vellore"

    def test_unknown_path(self) -> None:
        assert get(MockHazardFeed(), "/tides").status_code == 404
