"""Error taxonomy and user-facing alert classification."""

from enum import Enum

from pydantic import BaseModel


class PantryTrackerError(Exception):
    """Base class for all pantry-tracker errors."""


class ValidationError(PantryTrackerError, ValueError):
    """A candidate record is malformed and was rejected before persistence."""


class StoreCorruptError(PantryTrackerError):
    """The persisted collection blob cannot be parsed as the expected shape."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored value for '{key}' is corrupt: {reason}")
        self.key = key
        self.reason = reason


class NotFoundError(PantryTrackerError, KeyError):
    """A mutation targeted an identifier that is no longer present."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class DuplicateIdentifierError(PantryTrackerError):
    """An appended record shares its identifier with an existing one."""


class PermissionDeniedError(PantryTrackerError):
    """Notification scheduling was attempted without a platform grant."""


class NotificationPlatformError(PantryTrackerError):
    """The notification platform failed to register or cancel a trigger."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Item errors
    ERR_INVALID_ITEM = "ERR_INVALID_ITEM"
    ERR_ITEM_NOT_FOUND = "ERR_ITEM_NOT_FOUND"
    ERR_DUPLICATE_ITEM = "ERR_DUPLICATE_ITEM"

    # Storage errors
    ERR_STORE_CORRUPT = "ERR_STORE_CORRUPT"
    ERR_STORAGE_UNAVAILABLE = "ERR_STORAGE_UNAVAILABLE"

    # Notification errors
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_SCHEDULING_FAILED = "ERR_SCHEDULING_FAILED"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_NETWORK_PHRASES = ("connection", "timeout", "unreachable", "refused")


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured alert with recovery suggestions.

    Args:
        exception: The exception raised while handling a user action

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, ValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_ITEM,
            message=str(exception) or "The item details are invalid.",
            suggestion="Please enter a product title and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_ITEM_NOT_FOUND,
            message="That item is no longer in your pantry.",
            suggestion="Reload your items and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DuplicateIdentifierError):
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE_ITEM,
            message="This item has already been saved.",
            suggestion="Wait a moment before saving the same product again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, StoreCorruptError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_CORRUPT,
            message="Failed to load items from storage.",
            suggestion="Clear all items to reset the pantry if the problem persists.",
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, PermissionDeniedError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="Notifications are not allowed.",
            suggestion="Enable notifications to receive daily expiration reminders.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, NotificationPlatformError):
        return ErrorResponse(
            code=ErrorCode.ERR_SCHEDULING_FAILED,
            message="Failed to schedule the daily reminder.",
            suggestion="Please try saving the notification time again.",
            severity=ErrorSeverity.MEDIUM,
        )

    error_str = str(exception).lower()
    if isinstance(exception, ConnectionError | TimeoutError) or any(
        phrase in error_str for phrase in _NETWORK_PHRASES
    ):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE_UNAVAILABLE,
            message="Storage is currently unavailable.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later.",
        severity=ErrorSeverity.MEDIUM,
    )
