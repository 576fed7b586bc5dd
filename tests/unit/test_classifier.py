"""Unit tests for transient error classification."""

import pytest
import httpx
from types import SimpleNamespace

from google_drive_connector.utils.classifier import classify_remote_error, is_retryable
from google_drive_connector.utils.errors import (
    AuthenticationError,
    FatalRemoteError,
    RemoteError,
    TransientRemoteError,
)


class TestIsRetryable:
    """Test cases for is_retryable."""

    @pytest.mark.parametrize(
        "status_code,message",
        [
            (429, "Too Many Requests"),
            (429, "Rate Limit Exceeded"),
            (403, "Rate Limit Exceeded"),
            (500, "Backend Error"),
            (500, ""),
            (503, "Service Unavailable"),
            (503, "anything at all"),
        ],
    )
    def test_retryable_errors(self, status_code, message):
        assert is_retryable(RemoteError(message, status_code=status_code))

    @pytest.mark.parametrize(
        "status_code,message",
        [
            (403, "Forbidden"),
            (403, "Daily Limit Exceeded"),
            (429, "Quota exceeded"),
            (400, "Invalid query"),
            (401, "Invalid Credentials"),
            (404, "File not found"),
            (502, "Bad Gateway"),
        ],
    )
    def test_fatal_errors(self, status_code, message):
        assert not is_retryable(RemoteError(message, status_code=status_code))

    def test_reason_phrase_matches_when_message_differs(self):
        error = RemoteError(
            "User rate limit exceeded.", status_code=429, reason="Too Many Requests"
        )

        assert is_retryable(error)

    def test_network_timeout_without_status(self):
        assert is_retryable(RemoteError("timed out", timed_out=True))
        assert is_retryable(httpx.ReadTimeout("read timed out"))
        assert is_retryable(TimeoutError())

    def test_transport_error_without_status_is_fatal(self):
        assert not is_retryable(RemoteError("connection refused"))
        assert not is_retryable(httpx.ConnectError("connection refused"))

    def test_structural_match_on_foreign_errors(self):
        """Any exception exposing a status code and message is classified."""

        class ForeignError(Exception):
            def __init__(self, status_code, message):
                super().__init__(message)
                self.status_code = status_code
                self.message = message

        assert is_retryable(ForeignError(429, "Too Many Requests"))
        assert not is_retryable(ForeignError(404, "Not Found"))

    def test_resp_status_fallback(self):
        error = Exception("Rate Limit Exceeded")
        error.resp = SimpleNamespace(status=403)
        error.reason = "Rate Limit Exceeded"

        assert is_retryable(error)

    def test_plain_exceptions_are_fatal(self):
        assert not is_retryable(ValueError("bad"))
        assert not is_retryable(KeyError("missing"))

    def test_authentication_error_is_fatal(self):
        assert not is_retryable(AuthenticationError(status_code=401))


class TestClassifyRemoteError:
    """Test cases for classify_remote_error."""

    def test_transient_error_built_for_rate_limit(self):
        error = classify_remote_error(429, "Too Many Requests", reason="Too Many Requests")

        assert isinstance(error, TransientRemoteError)
        assert error.retriable is True
        assert error.status_code == 429
        assert str(error) == "429 Too Many Requests"

    def test_fatal_error_built_for_not_found(self):
        error = classify_remote_error(404, "File not found: abc", reason="Not Found")

        assert isinstance(error, FatalRemoteError)
        assert error.retriable is False
        assert error.details == {"status_code": 404, "reason": "Not Found"}

    def test_cause_is_chained(self):
        cause = httpx.ReadTimeout("read timed out")
        error = classify_remote_error(None, "timed out", cause=cause, timed_out=True)

        assert isinstance(error, TransientRemoteError)
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.to_dict()["details"] == {"timed_out": True}
