"""Cyclone Watch: hazard data freshness and access-control engine."""

__version__ = "0.1.0"
