"""Cache- and rate-limit-aware resource access."""

from .service import AccessLayer

__all__ = ["AccessLayer"]
