"""Unit tests for the data models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from cyclonewatch.models import (
    Coordinate,
    CycloneData,
    DashboardError,
    ErrorType,
    SavedRoute,
)


def cyclone_payload(**overrides) -> dict:
    payload = {
        "id": "CYC-1",
        "name": "Michaung",
        "pathway": [{"lat": 13.0, "lng": 80.2}],
        "currentPosition": {"lat": 13.0, "lng": 80.2},
        "windSpeed": 110,
        "pressure": 980,
        "category": "severe-cyclone",
        "lastUpdated": "2024-12-04T06:00:00Z",
    }
    payload.update(overrides)
    return payload


class TestCycloneData:
    """Tests for cyclone payload validation."""

    def test_camel_case_payload(self) -> None:
        cyclone = CycloneData.model_validate(cyclone_payload())
        assert cyclone.wind_speed == 110
        assert cyclone.current_position.lat == 13.0

    def test_dumps_camel_case(self) -> None:
        data = CycloneData.model_validate(cyclone_payload()).model_dump(by_alias=True)
        assert "windSpeed" in data

    @pytest.mark.parametrize("field", ["id", "name"])
    def test_blank_identity_rejected(self, field) -> None:
        with pytest.raises(ValidationError):
            CycloneData.model_validate(cyclone_payload(**{field: "  "}))

    def test_empty_pathway_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CycloneData.model_validate(cyclone_payload(pathway=[]))

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CycloneData.model_validate(cyclone_payload(category="hurricane"))


class TestCoordinate:
    def test_bounds(self) -> None:
        Coordinate(lat=90, lng=-180)
        with pytest.raises(ValidationError):
            Coordinate(lat=91, lng=0)


class TestSavedRoute:
    def test_accepts_snake_case(self) -> None:
        route = SavedRoute(
            id="r1", source="A", destination="B", saved_at=datetime.now(timezone.utc)
        )
        assert route.model_dump(mode="json", by_alias=True)["savedAt"]


class TestDashboardError:
    def test_attributes(self) -> None:
        error = DashboardError(ErrorType.API_ERROR, "failed", status_code=404)
        assert str(error) == "failed"
        assert error.retryable is False
        assert "API_ERROR" in repr(error)
