from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Callable, TypeVar

import backoff

from clients.errors import ExternalServiceError, is_rate_limit_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(ExternalServiceError):
    """Raised once every rate-limit retry has been spent."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class RateLimiter:
    """Token bucket shared by every executor of the process.

    Each dispatch takes one token; callers that find the bucket empty reserve
    the next token and sleep until it is due, outside the lock.
    """

    def __init__(
        self,
        requests_per_second: float,
        *,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if requests_per_second <= 0:
            msg = "requests_per_second must be > 0"
            raise ValueError(msg)
        if burst < 1:
            msg = "burst must be >= 1"
            raise ValueError(msg)

        self.requests_per_second = requests_per_second
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._updated_at = clock()
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Take one token, blocking until available. Returns the time waited."""
        with self._lock:
            now = self._clock()
            elapsed = now - self._updated_at
            self._updated_at = now
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.requests_per_second)
            self._tokens -= 1
            wait = 0.0 if self._tokens >= 0 else -self._tokens / self.requests_per_second
        if wait > 0:
            self._sleep(wait)
        return wait


class CallExecutor:
    """Runs external calls with pacing and exponential backoff on rate limits.

    Only "too many requests" failures are retried; everything else propagates
    on the first occurrence. Backoff waits go through ``backoff`` and
    ``time.sleep``; ``sleep`` only covers the pacing pause.
    """

    def __init__(
        self,
        *,
        pacing_seconds: float = 0.5,
        max_retries: int = 5,
        base_delay_seconds: float = 0.5,
        jitter_ratio: float = 0.1,
        limiter: RateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        if max_retries < 0:
            msg = "max_retries must be >= 0"
            raise ValueError(msg)
        if pacing_seconds < 0 or base_delay_seconds < 0 or jitter_ratio < 0:
            msg = "delays must be non-negative"
            raise ValueError(msg)

        self.pacing_seconds = pacing_seconds
        self.max_retries = max_retries
        self.base_delay_seconds = base_delay_seconds
        self.jitter_ratio = jitter_ratio
        self.limiter = limiter
        self._sleep = sleep
        self._rng = rng or random.Random()

    def execute(self, operation: Callable[[], T], *, pacing: float | None = None, limited: bool = True) -> T:
        """Run ``operation`` after the pacing pause.

        ``limited=False`` skips the shared limiter, for wrappers whose inner
        calls already take their own tokens.
        """
        pause = self.pacing_seconds if pacing is None else pacing
        if pause > 0:
            self._sleep(pause)

        def attempt() -> T:
            if limited and self.limiter is not None:
                self.limiter.acquire()
            return operation()

        retrying = backoff.on_exception(
            backoff.expo,
            Exception,
            base=2,
            factor=self.base_delay_seconds,
            max_tries=self.max_retries + 1,
            giveup=lambda exc: not is_rate_limit_error(exc),
            jitter=self._jitter,
            on_backoff=self._log_backoff,
            logger=None,
        )(attempt)
        try:
            return retrying()
        except Exception as exc:
            if not is_rate_limit_error(exc):
                raise
            attempts = self.max_retries + 1
            raise RetryExhaustedError(f"Rate limited after {attempts} attempts", attempts=attempts) from exc

    def _jitter(self, delay: float) -> float:
        return delay + self._rng.uniform(0, delay * self.jitter_ratio)

    def _log_backoff(self, details: dict[str, Any]) -> None:
        logger.warning(
            "Rate limited, retrying after %.0fms (retry %d/%d)",
            details["wait"] * 1000,
            details["tries"],
            self.max_retries,
        )


__all__ = ["CallExecutor", "RateLimiter", "RetryExhaustedError"]
