"""Error types for Cyclone Watch.

``DashboardError`` is the typed failure signal raised by the access layer.
``AppError`` is the serializable error envelope returned by the HTTP API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Kind of failure, independent of the exception class that caused it."""

    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DashboardError(Exception):
    """A classified failure from the access layer.

    Attributes:
        error_type: The failure kind.
        message: Human-readable description.
        retryable: Whether the transport retry policy applies.
        status_code: HTTP status for upstream errors, if any.
    """

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.retryable = retryable
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"DashboardError({self.error_type.value}, {self.message!r}, "
            f"retryable={self.retryable}, status_code={self.status_code})"
        )


class ErrorCode(str, Enum):
    """Error codes returned to API consumers."""

    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_ERROR = "API_ERROR"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"


class RecoveryOption(BaseModel):
    """An action the user can take to recover from an error."""

    label: str
    action: str


class AppError(BaseModel):
    """Error envelope for API responses."""

    code: ErrorCode
    message: str
    user_message: str
    recovery_options: Optional[list[RecoveryOption]] = Field(default=None)
