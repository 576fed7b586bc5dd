"""Classification of remote failures into transient and fatal.

The classifier is a structural match over a normalized error shape: any
exception exposing ``status_code`` together with ``message`` and/or
``reason`` is accepted, so it works with :class:`RemoteError` as well as
with errors raised by other Google client libraries.
"""

from typing import Any, Optional

import httpx

from .errors import FatalRemoteError, RemoteError, TransientRemoteError

TOO_MANY_REQUESTS_CODE = 429
LIMIT_RATE_EXCEEDED_CODE = 403
BACKEND_ERROR_CODE = 500
SERVICE_UNAVAILABLE_CODE = 503

TOO_MANY_REQUESTS_MESSAGE = "Too Many Requests"
LIMIT_RATE_EXCEEDED_MESSAGE = "Rate Limit Exceeded"

_RETRYABLE_MESSAGES = {
    TOO_MANY_REQUESTS_CODE: {TOO_MANY_REQUESTS_MESSAGE, LIMIT_RATE_EXCEEDED_MESSAGE},
    LIMIT_RATE_EXCEEDED_CODE: {LIMIT_RATE_EXCEEDED_MESSAGE},
}

# Codes retried regardless of message
_RETRYABLE_CODES = {BACKEND_ERROR_CODE, SERVICE_UNAVAILABLE_CODE}


def _status_code(error: Any) -> Optional[int]:
    code = getattr(error, "status_code", None)
    if code is None:
        # googleapiclient.errors.HttpError exposes resp.status
        resp = getattr(error, "resp", None)
        code = getattr(resp, "status", None)
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def _messages(error: Any) -> set:
    candidates = set()
    for attr in ("message", "reason", "status_message"):
        value = getattr(error, attr, None)
        if isinstance(value, str) and value:
            candidates.add(value)
    return candidates


def is_timeout(error: BaseException) -> bool:
    """Check whether an error is a network-level timeout with no status."""
    if getattr(error, "timed_out", False):
        return True
    return isinstance(error, (httpx.TimeoutException, TimeoutError))


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed remote call should be retried.

    Retryable iff one of:
    - 429 with "Too Many Requests" or "Rate Limit Exceeded"
    - 403 with "Rate Limit Exceeded"
    - 500 or 503, regardless of message
    - a network timeout (no status code available)

    Args:
        error: Exception raised by the remote operation

    Returns:
        True if the operation should be retried
    """
    code = _status_code(error)
    if code is None:
        return is_timeout(error)
    if code in _RETRYABLE_CODES:
        return True
    allowed = _RETRYABLE_MESSAGES.get(code)
    if allowed is None:
        return False
    return bool(_messages(error) & allowed)


def classify_remote_error(
    status_code: Optional[int],
    message: str,
    reason: Optional[str] = None,
    cause: Optional[BaseException] = None,
    timed_out: bool = False,
) -> RemoteError:
    """Build the transient or fatal error for a failed remote call.

    Args:
        status_code: HTTP status code, None when no response was received
        message: Error message from the API error body
        reason: HTTP reason phrase
        cause: Underlying exception
        timed_out: Whether the call failed on a timeout

    Returns:
        TransientRemoteError if retryable, FatalRemoteError otherwise
    """
    probe = RemoteError(
        message, status_code=status_code, reason=reason, timed_out=timed_out
    )
    error_cls = TransientRemoteError if is_retryable(probe) else FatalRemoteError
    return error_cls(
        message,
        status_code=status_code,
        reason=reason,
        cause=cause,
        timed_out=timed_out,
    )
