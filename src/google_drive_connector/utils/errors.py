"""Exception classes for the Google Drive / Sheets connector.

Remote failures are normalized into a single shape (status code, message,
reason phrase, optional cause) so the retry layer can classify them without
knowing which transport produced them.
"""

from typing import Optional, Dict, Any


class ConnectorError(Exception):
    """Base exception for all connector errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        retriable: bool = False,
    ):
        """Initialize connector error.

        Args:
            message: Error message
            details: Additional error details
            retriable: Whether this error is retriable
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.retriable = retriable

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization.

        Returns:
            Dictionary representation of the error
        """
        return {
            "message": self.message,
            "details": self.details,
            "retriable": self.retriable,
            "error_type": self.__class__.__name__,
        }


class RemoteError(ConnectorError):
    """A failed call against a Google API.

    Attributes:
        status_code: HTTP status code, None when no response was received
        reason: HTTP reason phrase (e.g. "Too Many Requests")
        cause: Underlying transport exception, if any
        timed_out: True when the call failed on a network-level timeout
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
        timed_out: bool = False,
        retriable: bool = False,
    ):
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if reason:
            details["reason"] = reason
        if timed_out:
            details["timed_out"] = True
        super().__init__(message, details, retriable=retriable)
        self.status_code = status_code
        self.reason = reason
        self.cause = cause
        self.timed_out = timed_out
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code} {self.message}"


class TransientRemoteError(RemoteError):
    """Remote failure expected to resolve on retry.

    Examples:
    - 429 Too Many Requests / Rate Limit Exceeded
    - 403 Rate Limit Exceeded
    - 500 backend error, 503 service unavailable
    - Socket timeouts
    """

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, retriable=True, **kwargs)


class FatalRemoteError(RemoteError):
    """Remote failure that must not be retried.

    Examples:
    - Invalid credentials
    - File or folder not found (404)
    - Malformed query (400)
    - Daily quota permanently exceeded
    """

    def __init__(self, message: str, **kwargs: Any):
        super().__init__(message, retriable=False, **kwargs)


class AuthenticationError(FatalRemoteError):
    """Credentials were rejected or could not be refreshed."""

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: Optional[int] = None,
        requires_reauth: bool = True,
    ):
        super().__init__(message, status_code=status_code)
        self.details["requires_reauth"] = requires_reauth


class RetriesExhausted(ConnectorError):
    """The retry budget was consumed while errors remained transient."""

    def __init__(self, description: str, attempts: int, last_error: BaseException):
        """Initialize exhaustion error.

        Args:
            description: Human readable description of the operation
            attempts: Number of invocations performed
            last_error: The last transient error observed
        """
        super().__init__(
            f"Retries exhausted after {attempts} attempts: {description}",
            {"attempts": attempts, "last_error": str(last_error)},
        )
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
        self.__cause__ = last_error


class OperationCancelled(ConnectorError):
    """Cancellation was requested while waiting between attempts."""

    def __init__(self, description: str, attempts: int):
        super().__init__(
            f"Operation cancelled after {attempts} attempts: {description}",
            {"attempts": attempts},
        )
        self.description = description
        self.attempts = attempts


class ConfigValidationError(ConnectorError):
    """Exception for invalid plugin configuration values."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field
        super().__init__(message, details)
        self.field = field


class InvalidDateRange(ConfigValidationError):
    """Date range type is unknown or custom dates are malformed."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message, field="modification_date_range")
        self.value = value
        if value is not None:
            self.details["value"] = value


class InvalidFilterType(ConfigValidationError):
    """An unrecognized file (export) type was requested for filtering."""

    def __init__(self, value: str):
        super().__init__(
            f"Unknown file type '{value}'",
            field="file_types_to_pull",
        )
        self.value = value
        self.details["value"] = value
