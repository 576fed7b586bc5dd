"""Unit tests for the retry executor."""

import asyncio
import threading

import pytest
from pydantic import ValidationError
from unittest.mock import AsyncMock, MagicMock, patch

from google_drive_connector.config import RetrySettings
from google_drive_connector.utils.errors import (
    FatalRemoteError,
    OperationCancelled,
    RetriesExhausted,
    TransientRemoteError,
)
from google_drive_connector.utils.retry import (
    RetryConfig,
    RetryEvent,
    RetryEventRecorder,
    RetryExecutor,
    log_retry_event,
    with_retry,
)


def rate_limited():
    return TransientRemoteError(
        "Too Many Requests", status_code=429, reason="Too Many Requests"
    )


def no_jitter(low, high):
    return 0.0


class TestRetryConfig:
    """Test cases for RetryConfig."""

    def test_defaults(self):
        config = RetryConfig()

        assert config.base_wait_ms == 1000
        assert config.max_wait_ms == 200_000
        assert config.jitter_ms == 100
        assert config.max_attempts == 8

    def test_max_wait_must_exceed_base_wait(self):
        with pytest.raises(ValidationError):
            RetryConfig(base_wait_ms=1000, max_wait_ms=1000)

    def test_base_wait_must_be_positive(self):
        with pytest.raises(ValidationError):
            RetryConfig(base_wait_ms=0)

    def test_negative_attempts_rejected(self):
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=-1)

    def test_frozen(self):
        config = RetryConfig()

        with pytest.raises(ValidationError):
            config.max_attempts = 3

    def test_from_settings_converts_seconds(self):
        settings = RetrySettings(
            max_retry_count=5, max_retry_wait=30, max_retry_jitter_wait=250
        )

        config = RetryConfig.from_settings(settings)

        assert config.max_attempts == 5
        assert config.max_wait_ms == 30_000
        assert config.jitter_ms == 250
        assert config.base_wait_ms == 1000


@pytest.mark.asyncio
class TestRetryExecutor:
    """Test cases for RetryExecutor.execute."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.fixture
    def recorder(self):
        return RetryEventRecorder()

    def make_executor(self, sleep, recorder, max_attempts=3, jitter=no_jitter):
        return RetryExecutor(
            RetryConfig(max_attempts=max_attempts),
            listeners=[recorder],
            jitter_source=jitter,
            sleep=sleep,
        )

    async def test_success_on_first_attempt(self, sleep, recorder):
        operation = AsyncMock(return_value="ok")
        executor = self.make_executor(sleep, recorder)

        result = await executor.execute(operation, "List files")

        assert result == "ok"
        assert operation.await_count == 1
        sleep.assert_not_awaited()
        assert recorder.count == 0

    async def test_success_after_transient_failures(self, sleep, recorder):
        operation = AsyncMock(side_effect=[rate_limited(), rate_limited(), "ok"])
        executor = self.make_executor(sleep, recorder)

        result = await executor.execute(operation, "List files")

        assert result == "ok"
        assert operation.await_count == 3
        assert sleep.await_count == 2

    async def test_exhaustion_after_k_retries(self, sleep, recorder):
        """K retries mean K + 1 invocations before giving up."""
        last = rate_limited()
        operation = AsyncMock(side_effect=[rate_limited(), rate_limited(), rate_limited(), last])
        executor = self.make_executor(sleep, recorder, max_attempts=3)

        with pytest.raises(RetriesExhausted) as exc_info:
            await executor.execute(operation, "List files")

        assert operation.await_count == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert sleep.await_count == 3

    async def test_delays_follow_true_exponential(self, sleep, recorder):
        operation = AsyncMock(side_effect=rate_limited())
        executor = self.make_executor(sleep, recorder, max_attempts=4)

        with pytest.raises(RetriesExhausted):
            await executor.execute(operation)

        waits = [call.args[0] for call in sleep.await_args_list]
        assert waits == [1.0, 2.0, 4.0, 8.0]

    async def test_jitter_is_added_to_each_wait(self, sleep, recorder):
        operation = AsyncMock(side_effect=[rate_limited(), rate_limited(), "ok"])
        executor = self.make_executor(
            sleep, recorder, jitter=lambda low, high: 25.0
        )

        await executor.execute(operation)

        waits = [call.args[0] for call in sleep.await_args_list]
        assert waits == [pytest.approx(1.025), pytest.approx(2.025)]

    async def test_fatal_error_propagates_unchanged(self, sleep, recorder):
        error = FatalRemoteError("File not found", status_code=404)
        operation = AsyncMock(side_effect=error)
        executor = self.make_executor(sleep, recorder)

        with pytest.raises(FatalRemoteError) as exc_info:
            await executor.execute(operation)

        assert exc_info.value is error
        assert operation.await_count == 1
        sleep.assert_not_awaited()
        assert recorder.count == 0

    async def test_unclassified_exception_propagates(self, sleep, recorder):
        operation = AsyncMock(side_effect=KeyError("files"))
        executor = self.make_executor(sleep, recorder)

        with pytest.raises(KeyError):
            await executor.execute(operation)

        assert operation.await_count == 1

    async def test_zero_attempts_invokes_once(self, sleep, recorder):
        operation = AsyncMock(side_effect=rate_limited())
        executor = self.make_executor(sleep, recorder, max_attempts=0)

        with pytest.raises(RetriesExhausted) as exc_info:
            await executor.execute(operation)

        assert operation.await_count == 1
        assert exc_info.value.attempts == 1
        sleep.assert_not_awaited()

    async def test_listener_receives_each_retry(self, sleep, recorder):
        errors = [rate_limited(), TransientRemoteError("Backend Error", status_code=500)]
        operation = AsyncMock(side_effect=[*errors, "ok"])
        executor = self.make_executor(sleep, recorder)

        await executor.execute(operation, "Download file, id: 'abc'")

        assert recorder.count == 2
        first, second = recorder.events
        assert first.attempt == 1
        assert first.delay_ms == 1000.0
        assert first.error is errors[0]
        assert first.status_code == 429
        assert first.message == "Too Many Requests"
        assert first.description == "Download file, id: 'abc'"
        assert second.attempt == 2
        assert second.delay_ms == 2000.0
        assert second.status_code == 500

    async def test_default_listener_logs(self, sleep):
        operation = AsyncMock(side_effect=[rate_limited(), "ok"])
        executor = RetryExecutor(
            RetryConfig(max_attempts=2), jitter_source=no_jitter, sleep=sleep
        )

        with patch("google_drive_connector.utils.retry.logger") as mock_logger:
            await executor.execute(operation, "List files")

        mock_logger.warning.assert_called_once()
        kwargs = mock_logger.warning.call_args.kwargs
        assert kwargs["error_code"] == 429
        assert kwargs["attempt"] == 1
        assert kwargs["delay_ms"] == 1000
        assert kwargs["description"] == "List files"

    async def test_empty_listeners_are_silent(self, sleep):
        operation = AsyncMock(side_effect=[rate_limited(), "ok"])
        executor = RetryExecutor(
            RetryConfig(max_attempts=2), listeners=[], jitter_source=no_jitter, sleep=sleep
        )

        with patch("google_drive_connector.utils.retry.logger") as mock_logger:
            assert await executor.execute(operation) == "ok"

        mock_logger.warning.assert_not_called()

    async def test_custom_retry_predicate(self, sleep, recorder):
        operation = AsyncMock(side_effect=[ValueError("flaky"), "ok"])
        executor = RetryExecutor(
            RetryConfig(max_attempts=2),
            listeners=[recorder],
            jitter_source=no_jitter,
            sleep=sleep,
            retry_predicate=lambda e: isinstance(e, ValueError),
        )

        assert await executor.execute(operation) == "ok"
        assert recorder.count == 1

    async def test_cancel_event_already_set(self, recorder):
        cancel = asyncio.Event()
        cancel.set()
        operation = AsyncMock(side_effect=rate_limited())
        executor = RetryExecutor(
            RetryConfig(max_attempts=5), listeners=[recorder], jitter_source=no_jitter
        )

        with pytest.raises(OperationCancelled) as exc_info:
            await executor.execute(operation, "List files", cancel_event=cancel)

        assert operation.await_count == 1
        assert exc_info.value.attempts == 1

    async def test_cancel_event_interrupts_wait(self, recorder):
        cancel = asyncio.Event()
        operation = AsyncMock(side_effect=rate_limited())
        executor = RetryExecutor(
            RetryConfig(base_wait_ms=60_000, max_wait_ms=120_000, max_attempts=5),
            listeners=[recorder],
            jitter_source=no_jitter,
        )
        asyncio.get_running_loop().call_later(0.01, cancel.set)

        with pytest.raises(OperationCancelled):
            await asyncio.wait_for(
                executor.execute(operation, cancel_event=cancel), timeout=5
            )

        assert operation.await_count == 1

    async def test_unset_cancel_event_lets_retry_continue(self, recorder):
        cancel = asyncio.Event()
        operation = AsyncMock(side_effect=[rate_limited(), "ok"])
        executor = RetryExecutor(
            RetryConfig(base_wait_ms=1, max_wait_ms=10, jitter_ms=0, max_attempts=2),
            listeners=[recorder],
        )

        assert await executor.execute(operation, cancel_event=cancel) == "ok"
        assert operation.await_count == 2

    async def test_with_retry_decorator(self, sleep, recorder):
        calls = []

        executor = self.make_executor(sleep, recorder)

        @with_retry(executor, "Fetch page")
        async def fetch(token):
            calls.append(token)
            if len(calls) == 1:
                raise rate_limited()
            return {"token": token}

        assert await fetch("abc") == {"token": "abc"}
        assert calls == ["abc", "abc"]
        assert recorder.events[0].description == "Fetch page"


class TestExecuteBlocking:
    """Test cases for RetryExecutor.execute_blocking."""

    def test_exhaustion_after_k_retries(self):
        sleep = MagicMock()
        operation = MagicMock(side_effect=rate_limited())
        executor = RetryExecutor(
            RetryConfig(max_attempts=2),
            listeners=[],
            jitter_source=no_jitter,
            blocking_sleep=sleep,
        )

        with pytest.raises(RetriesExhausted) as exc_info:
            executor.execute_blocking(operation, "Append rows")

        assert operation.call_count == 3
        assert exc_info.value.attempts == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_fatal_error_propagates(self):
        error = FatalRemoteError("Bad Request", status_code=400)
        operation = MagicMock(side_effect=error)
        executor = RetryExecutor(listeners=[], blocking_sleep=MagicMock())

        with pytest.raises(FatalRemoteError) as exc_info:
            executor.execute_blocking(operation)

        assert exc_info.value is error
        assert operation.call_count == 1

    def test_success_returns_value(self):
        operation = MagicMock(side_effect=[rate_limited(), 7])
        executor = RetryExecutor(
            listeners=[], jitter_source=no_jitter, blocking_sleep=MagicMock()
        )

        assert executor.execute_blocking(operation) == 7

    def test_cancel_event(self):
        cancel = threading.Event()
        cancel.set()
        operation = MagicMock(side_effect=rate_limited())
        executor = RetryExecutor(listeners=[], jitter_source=no_jitter)

        with pytest.raises(OperationCancelled):
            executor.execute_blocking(operation, "Append rows", cancel_event=cancel)

        assert operation.call_count == 1

    def test_shared_executor_across_threads(self):
        recorder = RetryEventRecorder()
        executor = RetryExecutor(
            RetryConfig(max_attempts=1),
            listeners=[recorder],
            jitter_source=no_jitter,
            blocking_sleep=MagicMock(),
        )
        results = []

        def worker(n):
            outcomes = iter([rate_limited(), n])

            def operation():
                outcome = next(outcomes)
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome

            results.append(executor.execute_blocking(operation))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == [0, 1, 2, 3]
        assert recorder.count == 4


def test_log_retry_event_formats_fields():
    event = RetryEvent(
        description="List files",
        attempt=2,
        delay_ms=2050.4,
        error=rate_limited(),
        elapsed_ms=1000.0,
    )

    with patch("google_drive_connector.utils.retry.logger") as mock_logger:
        log_retry_event(event)

    mock_logger.warning.assert_called_once_with(
        "Retrying Google API request",
        error_code=429,
        error_message="Too Many Requests",
        attempt=2,
        delay_ms=2050,
        delay_since_first_ms=1000,
        description="List files",
    )
