"""Circuit breaker for outbound calls (chat completions, search, transcripts).

After ``failure_threshold`` consecutive failures the breaker opens and rejects
calls for ``timeout`` seconds. The first call after that window is a trial
(HALF_OPEN): success closes the circuit, failure opens it again.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpenError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_after: float) -> None:
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{name}' open - service unavailable (retry in {retry_after:.0f}s)"
        )


@dataclass
class CircuitBreaker:
    """Per-service failure guard.

    Example:
        >>> breaker = CircuitBreaker(name="searxng", failure_threshold=5, timeout=60.0)
        >>> results = await breaker.call_with_retries(fetch, query, fallback=lambda: [])

    Attributes:
        name: Service label used in log events and errors
        failure_threshold: Consecutive failures before the circuit opens
        timeout: Seconds the circuit stays open before a trial call
    """

    name: str = "default"
    failure_threshold: int = 5
    timeout: float = 60.0

    state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    failure_count: int = field(default=0, init=False)
    opened_at: float | None = field(default=None, init=False)

    def retry_after(self) -> float:
        """Seconds left before an open circuit admits a trial call."""
        if self.state is not CircuitState.OPEN or self.opened_at is None:
            return 0.0
        return max(0.0, self.timeout - (time.monotonic() - self.opened_at))

    def allow_request(self) -> None:
        """Admit a call or raise CircuitBreakerOpenError.

        An open circuit whose timeout elapsed moves to HALF_OPEN and admits
        the call.
        """
        if self.state is not CircuitState.OPEN:
            return
        remaining = self.retry_after()
        if remaining > 0:
            raise CircuitBreakerOpenError(self.name, remaining)
        self.state = CircuitState.HALF_OPEN
        logger.info("circuit_half_open", breaker=self.name)

    def record_success(self) -> None:
        if self.state is not CircuitState.CLOSED:
            logger.info("circuit_closed", breaker=self.name)
        self.failure_count = 0
        self.opened_at = None
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self.failure_count += 1
        trial_failed = self.state is CircuitState.HALF_OPEN
        if trial_failed or self.failure_count >= self.failure_threshold:
            if self.state is not CircuitState.OPEN:
                logger.warning(
                    "circuit_opened",
                    breaker=self.name,
                    failures=self.failure_count,
                    timeout=self.timeout,
                )
            self.state = CircuitState.OPEN
            self.opened_at = time.monotonic()

    def reset(self) -> None:
        """Force the circuit closed."""
        self.record_success()

    async def call(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        """Await ``func(*args, **kwargs)`` under the breaker.

        Raises:
            CircuitBreakerOpenError: If the circuit is open
            Exception: Whatever func raises
        """
        self.allow_request()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    async def call_with_retries(
        self,
        func: Callable,
        *args: Any,
        retries: int = 3,
        backoff_base: float = 0.5,
        backoff_factor: float = 2.0,
        fallback: Callable[[], Any] | None = None,
        jitter: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Like ``call`` but retries with exponential backoff.

        Args:
            func: Async function to call
            *args: Positional args for func
            retries: Retries after the first attempt
            backoff_base: First delay in seconds
            backoff_factor: Delay multiplier per retry
            fallback: 0-arg callable whose result is returned instead of
                raising once retries are exhausted or the circuit is open
            jitter: Stretch each delay by a random factor in [1, 2)
            **kwargs: Keyword args for func

        Raises:
            CircuitBreakerOpenError: If the circuit is open and there is no fallback
            Exception: The last error when retries are exhausted and there is no fallback
        """
        delay = backoff_base
        for attempt in range(retries + 1):
            try:
                self.allow_request()
            except CircuitBreakerOpenError:
                if fallback is None:
                    raise
                logger.warning("circuit_fallback", breaker=self.name, reason="open")
                return fallback()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                self.record_failure()
                if attempt == retries:
                    if fallback is None:
                        raise
                    logger.warning(
                        "circuit_fallback", breaker=self.name, reason="exhausted", error=str(e)
                    )
                    return fallback()
                await self._sleep(delay, jitter=jitter)
                delay *= backoff_factor
                continue

            self.record_success()
            return result

    async def _sleep(self, delay: float, jitter: bool = True) -> None:
        await asyncio.sleep(delay * (1.0 + random.random()) if jitter else delay)
