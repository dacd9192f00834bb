"""Synthetic hazard feed served through httpx.MockTransport."""

from .service import DISTRICTS, MockHazardFeed

__all__ = ["DISTRICTS", "MockHazardFeed"]
