"""Utility modules for the Google Drive / Sheets connector."""

from .errors import (
    ConnectorError,
    RemoteError,
    TransientRemoteError,
    FatalRemoteError,
    AuthenticationError,
    RetriesExhausted,
    OperationCancelled,
    ConfigValidationError,
    InvalidDateRange,
    InvalidFilterType,
)
from .backoff import compute_delay, build_wait_strategy
from .classifier import is_retryable, classify_remote_error
from .retry import (
    RetryConfig,
    RetryEvent,
    RetryEventRecorder,
    RetryExecutor,
    log_retry_event,
    with_retry,
)

__all__ = [
    # Error classes
    "ConnectorError",
    "RemoteError",
    "TransientRemoteError",
    "FatalRemoteError",
    "AuthenticationError",
    "RetriesExhausted",
    "OperationCancelled",
    "ConfigValidationError",
    "InvalidDateRange",
    "InvalidFilterType",
    # Retry layer
    "compute_delay",
    "build_wait_strategy",
    "is_retryable",
    "classify_remote_error",
    "RetryConfig",
    "RetryEvent",
    "RetryEventRecorder",
    "RetryExecutor",
    "log_retry_event",
    "with_retry",
]
