"""Error taxonomy and classification utilities for the reminder engine."""

from enum import Enum

from pydantic import BaseModel

from src.core.config import Constants


class GeoNudgeError(Exception):
    """Base class for all engine errors."""


class InvalidArgumentError(GeoNudgeError, ValueError):
    """Raised for empty names and malformed coordinates."""


class OutOfRangeError(GeoNudgeError, IndexError):
    """Raised when an index-based favorite lookup is out of bounds."""


class PermissionDeniedError(GeoNudgeError, PermissionError):
    """Raised when location access has not been granted."""


class PersistenceError(GeoNudgeError, RuntimeError):
    """Raised by storage backends when a load or save fails."""


class TaskNotFoundError(GeoNudgeError, KeyError):
    """Raised when a mutation targets a task id that does not exist."""

    def __str__(self) -> str:
        # KeyError repr-quotes its argument; keep messages readable
        return str(self.args[0]) if self.args else "Task not found"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_INVALID_ARGUMENT = "ERR_INVALID_ARGUMENT"
    ERR_OUT_OF_RANGE = "ERR_OUT_OF_RANGE"
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_PERSISTENCE_FAILURE = "ERR_PERSISTENCE_FAILURE"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    http_status: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, severity and HTTP status
    """
    if isinstance(exception, TaskNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message=str(exception),
            suggestion="List tasks to find a valid task id.",
            severity=ErrorSeverity.LOW,
            http_status=Constants.HTTP_NOT_FOUND,
        )

    if isinstance(exception, OutOfRangeError):
        return ErrorResponse(
            code=ErrorCode.ERR_OUT_OF_RANGE,
            message=str(exception),
            suggestion="List favorites to find a valid index.",
            severity=ErrorSeverity.LOW,
            http_status=Constants.HTTP_NOT_FOUND,
        )

    if isinstance(exception, InvalidArgumentError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_ARGUMENT,
            message=str(exception),
            suggestion="Check the name is not blank and coordinates are within range.",
            severity=ErrorSeverity.LOW,
            http_status=Constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, PermissionDeniedError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="Location access is not available.",
            suggestion="Grant foreground location permission to use the current location.",
            severity=ErrorSeverity.MEDIUM,
            http_status=Constants.HTTP_FORBIDDEN,
        )

    if isinstance(exception, PersistenceError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE_FAILURE,
            message="Saved state could not be read or written.",
            suggestion="Changes are kept in memory and will be saved on the next successful write.",
            severity=ErrorSeverity.HIGH,
            http_status=Constants.HTTP_SERVICE_UNAVAILABLE,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, check the service logs.",
        severity=ErrorSeverity.MEDIUM,
        http_status=Constants.HTTP_SERVER_ERROR,
    )
