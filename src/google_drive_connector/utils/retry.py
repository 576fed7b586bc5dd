"""Retry executor for Google API calls.

Wraps a caller-supplied remote operation with tenacity: transient failures
(see :mod:`.classifier`) are retried with true exponential backoff plus an
independent jitter term, fatal failures propagate unchanged, and running out
of attempts raises :class:`RetriesExhausted` with the last error as cause.

Every retry is reported to injectable listeners as a :class:`RetryEvent`;
the executor itself never logs.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from functools import wraps
from typing import (
    Any,
    Awaitable,
    Callable,
    Iterable,
    List,
    Optional,
    TypeVar,
)

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from ..config import RetrySettings
from .backoff import JitterSource, build_wait_strategy
from .classifier import is_retryable
from .errors import OperationCancelled, RetriesExhausted

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_BASE_WAIT_MS = 1000


class RetryConfig(BaseModel):
    """Immutable retry configuration, all waits in milliseconds."""

    model_config = ConfigDict(frozen=True)

    base_wait_ms: int = Field(default=DEFAULT_BASE_WAIT_MS, gt=0)
    max_wait_ms: int = Field(default=200_000, gt=0)
    jitter_ms: int = Field(default=100, ge=0)
    max_attempts: int = Field(default=8, ge=0)

    @model_validator(mode="after")
    def check_wait_bounds(self) -> "RetryConfig":
        if self.max_wait_ms <= self.base_wait_ms:
            raise ValueError(
                f"max_wait_ms ({self.max_wait_ms}) must be greater than "
                f"base_wait_ms ({self.base_wait_ms})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryConfig":
        """Build from user-facing settings (wait cap in seconds, jitter in ms)."""
        return cls(
            base_wait_ms=DEFAULT_BASE_WAIT_MS,
            max_wait_ms=settings.max_retry_wait * 1000,
            jitter_ms=settings.max_retry_jitter_wait,
            max_attempts=settings.max_retry_count,
        )


@dataclass(frozen=True)
class RetryEvent:
    """A single retry decision, emitted before the executor sleeps."""

    description: str
    attempt: int
    delay_ms: float
    error: BaseException
    elapsed_ms: float

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.error, "status_code", None)

    @property
    def message(self) -> str:
        return getattr(self.error, "message", None) or str(self.error)


RetryListener = Callable[[RetryEvent], None]


def log_retry_event(event: RetryEvent) -> None:
    """Stock listener: log each retry as a structured warning."""
    logger.warning(
        "Retrying Google API request",
        error_code=event.status_code,
        error_message=event.message,
        attempt=event.attempt,
        delay_ms=round(event.delay_ms),
        delay_since_first_ms=round(event.elapsed_ms),
        description=event.description,
    )


class RetryEventRecorder:
    """Listener that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[RetryEvent] = []
        self._lock = threading.Lock()

    def __call__(self, event: RetryEvent) -> None:
        with self._lock:
            self.events.append(event)

    @property
    def count(self) -> int:
        return len(self.events)


class RetryExecutor:
    """Runs remote operations under the retry policy.

    The executor holds only read-only configuration, so one instance can be
    shared by concurrent tasks and threads.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        listeners: Optional[Iterable[RetryListener]] = None,
        jitter_source: Optional[JitterSource] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        blocking_sleep: Optional[Callable[[float], None]] = None,
        retry_predicate: Callable[[BaseException], bool] = is_retryable,
    ):
        """Initialize the executor.

        Args:
            config: Retry configuration, defaults to ``RetryConfig()``
            listeners: Callbacks invoked for every retry; defaults to
                :func:`log_retry_event`. Pass an empty list for silence.
            jitter_source: ``(low, high) -> float`` uniform source
            sleep: Async sleep used between attempts (seconds)
            blocking_sleep: Blocking sleep used by :meth:`execute_blocking`
            retry_predicate: Classifier deciding which errors are retried
        """
        self.config = config or RetryConfig()
        self.listeners = (
            list(listeners) if listeners is not None else [log_retry_event]
        )
        self.jitter_source = jitter_source
        self._sleep = sleep or asyncio.sleep
        self._blocking_sleep = blocking_sleep or time.sleep
        self.retry_predicate = retry_predicate

    def _retry_kwargs(self, description: str) -> dict:
        return dict(
            retry=retry_if_exception(self.retry_predicate),
            stop=stop_after_attempt(self.config.max_attempts + 1),
            wait=build_wait_strategy(
                self.config.base_wait_ms,
                self.config.max_wait_ms,
                self.config.jitter_ms,
                self.jitter_source,
            ),
            before_sleep=self._notifier(description),
            reraise=False,
        )

    def _notifier(self, description: str) -> Callable[[RetryCallState], None]:
        def notify(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            event = RetryEvent(
                description=description,
                attempt=retry_state.attempt_number,
                delay_ms=retry_state.next_action.sleep * 1000.0,
                error=error,
                elapsed_ms=(retry_state.seconds_since_start or 0.0) * 1000.0,
            )
            for listener in self.listeners:
                listener(event)

        return notify

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "Google API request",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """Invoke an async operation, retrying transient failures.

        Args:
            operation: Zero-argument coroutine function performing one call
            description: Operation description included in retry events
            cancel_event: When set during a backoff wait, the wait is cut
                short and :class:`OperationCancelled` is raised

        Returns:
            The operation result

        Raises:
            RetriesExhausted: Attempts ran out while errors stayed transient
            OperationCancelled: ``cancel_event`` was set between attempts
            Exception: Any non-retryable error, unchanged
        """
        attempts = 0

        async def attempt() -> T:
            nonlocal attempts
            attempts += 1
            return await operation()

        async def wait(seconds: float) -> None:
            if cancel_event is None:
                await self._sleep(seconds)
                return
            if cancel_event.is_set():
                raise OperationCancelled(description, attempts)
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                return
            raise OperationCancelled(description, attempts)

        retrying = AsyncRetrying(sleep=wait, **self._retry_kwargs(description))
        try:
            return await retrying(attempt)
        except RetryError as e:
            raise RetriesExhausted(
                description, attempts, e.last_attempt.exception()
            ) from e.last_attempt.exception()

    def execute_blocking(
        self,
        operation: Callable[[], T],
        description: str = "Google API request",
        cancel_event: Optional[threading.Event] = None,
    ) -> T:
        """Blocking counterpart of :meth:`execute` for worker threads."""
        attempts = 0

        def attempt() -> T:
            nonlocal attempts
            attempts += 1
            return operation()

        def wait(seconds: float) -> None:
            if cancel_event is None:
                self._blocking_sleep(seconds)
                return
            if cancel_event.wait(timeout=seconds):
                raise OperationCancelled(description, attempts)

        retrying = Retrying(sleep=wait, **self._retry_kwargs(description))
        try:
            return retrying(attempt)
        except RetryError as e:
            raise RetriesExhausted(
                description, attempts, e.last_attempt.exception()
            ) from e.last_attempt.exception()


def with_retry(executor: RetryExecutor, description: Optional[str] = None):
    """Decorator running an async function through a retry executor.

    Example:
        @with_retry(executor, "List folder")
        async def list_page(token):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await executor.execute(
                lambda: func(*args, **kwargs),
                description or func.__name__,
            )

        return wrapper

    return decorator
