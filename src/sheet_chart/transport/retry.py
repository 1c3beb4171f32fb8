"""Retrying client for sheet retrieval: exponential backoff, jitter, cancellation."""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from sheet_chart.core.errors import RetryCancelled, UpstreamFetchError
from sheet_chart.core.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: float = 0.1  # +/- fraction of the computed delay

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")
        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")

    def delay(self, attempt: int, rng: random.Random) -> float:
        """Wait before retry number `attempt` (1-based)."""
        base = min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))
        if self.jitter:
            base *= 1.0 + rng.uniform(-self.jitter, self.jitter)
        return max(0.0, base)


class CancellationToken:
    """Set by the caller when a newer request supersedes this one."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`; True if cancelled meanwhile."""
        return self._event.wait(seconds)


class RetryingClient(Generic[T]):
    """
    Wraps a fetch function. Only UpstreamFetchError with retryable=True is
    retried; everything else propagates on the first failure.
    """

    def __init__(
        self,
        fn: Callable[..., T],
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.fn = fn
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()

    def _wait(self, seconds: float, token: Optional[CancellationToken]) -> None:
        if token is None:
            self._sleep(seconds)
            return
        if seconds > 0 and self._sleep is time.sleep:
            if token.wait(seconds):
                raise RetryCancelled("Request was cancelled.")
            return
        self._sleep(seconds)
        if token.cancelled:
            raise RetryCancelled("Request was cancelled.")

    def call(self, *args: object, cancel_token: Optional[CancellationToken] = None, **kwargs: object) -> T:
        attempt = 0
        while True:
            if cancel_token is not None and cancel_token.cancelled:
                raise RetryCancelled("Request was cancelled.")
            attempt += 1
            try:
                return self.fn(*args, **kwargs)
            except UpstreamFetchError as e:
                if not e.retryable or attempt >= self.policy.max_attempts:
                    raise
                delay = self.policy.delay(attempt, self._rng)
                logger.info(
                    "Retrying request (%d/%d) in %.2fs: %s",
                    attempt,
                    self.policy.max_attempts - 1,
                    delay,
                    e.message,
                )
                self._wait(delay, cancel_token)
