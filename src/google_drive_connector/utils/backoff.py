"""Backoff policy for Google API retries.

The wait before retry ``n`` is the sum of two independent components:

- a true exponential component, ``base * 2 ** (n - 1)`` capped at ``max``
- a uniformly random jitter component in ``[0, jitter]``

Both are expressed as tenacity wait strategies so they can be combined with
``+`` (``tenacity.wait_combine``) and handed to ``Retrying``/``AsyncRetrying``.
All public values are milliseconds; tenacity works in seconds.
"""

import random
from typing import Callable, Optional

from tenacity import RetryCallState
from tenacity.wait import wait_base

# Uniform source returning a value in [low, high]
JitterSource = Callable[[float, float], float]


def compute_delay(attempt_number: int, base_wait: float, max_wait: float) -> float:
    """Calculate the exponential wait for a failed attempt.

    Args:
        attempt_number: 1-based number of the attempt that failed
        base_wait: Wait after the first failure
        max_wait: Upper bound for the returned wait

    Returns:
        ``min(base_wait * 2 ** (attempt_number - 1), max_wait)``, never negative
    """
    if attempt_number < 1:
        attempt_number = 1
    try:
        delay = base_wait * (2 ** (attempt_number - 1))
    except OverflowError:
        delay = max_wait
    delay = min(delay, max_wait)
    return max(0.0, float(delay))


def uniform_jitter(jitter_ms: float, source: Optional[JitterSource] = None) -> float:
    """Draw a jitter value in ``[0, jitter_ms]``."""
    if jitter_ms <= 0:
        return 0.0
    draw = (source or random.uniform)(0.0, float(jitter_ms))
    return min(max(0.0, draw), float(jitter_ms))


class wait_true_exponential(wait_base):
    """Exponential wait that starts at ``base_wait_ms`` for the first retry.

    tenacity's ``wait_exponential`` clamps against a ``min`` and applies its
    multiplier to ``exp_base ** (attempt - 1)``; this strategy is kept separate
    so the millisecond policy in :func:`compute_delay` is the single source of
    truth.
    """

    def __init__(self, base_wait_ms: float, max_wait_ms: float):
        if base_wait_ms <= 0:
            raise ValueError(f"base_wait_ms must be > 0 but is {base_wait_ms}")
        if max_wait_ms < 0:
            raise ValueError(f"max_wait_ms must be >= 0 but is {max_wait_ms}")
        if base_wait_ms >= max_wait_ms:
            raise ValueError(
                f"base_wait_ms must be < max_wait_ms but is {base_wait_ms}"
            )
        self.base_wait_ms = base_wait_ms
        self.max_wait_ms = max_wait_ms

    def __call__(self, retry_state: RetryCallState) -> float:
        delay_ms = compute_delay(
            retry_state.attempt_number, self.base_wait_ms, self.max_wait_ms
        )
        return delay_ms / 1000.0


class wait_jitter(wait_base):
    """Independent random wait in ``[0, jitter_ms]``.

    The random source is injectable so tests can pin the jitter term.
    """

    def __init__(self, jitter_ms: float, source: Optional[JitterSource] = None):
        if jitter_ms < 0:
            raise ValueError(f"jitter_ms must be >= 0 but is {jitter_ms}")
        self.jitter_ms = jitter_ms
        self.source = source

    def __call__(self, retry_state: RetryCallState) -> float:
        return uniform_jitter(self.jitter_ms, self.source) / 1000.0


def build_wait_strategy(
    base_wait_ms: float,
    max_wait_ms: float,
    jitter_ms: float,
    jitter_source: Optional[JitterSource] = None,
) -> wait_base:
    """Combine exponential and jitter waits by summing them."""
    return wait_true_exponential(base_wait_ms, max_wait_ms) + wait_jitter(
        jitter_ms, jitter_source
    )
