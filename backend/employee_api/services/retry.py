from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")

Backoff = Callable[[int], float]


def fixed_backoff(delay: float) -> Backoff:
    """Same wait before every retry."""

    def _backoff(attempt: int) -> float:
        return float(delay)

    return _backoff


def exponential_backoff(initial: float, multiplier: float = 2.0, max_delay: float | None = None) -> Backoff:
    """
    Wait `initial * multiplier**(attempt-1)` seconds, capped at `max_delay`.

    `attempt` is the 1-based number of the attempt that just failed.
    """

    def _backoff(attempt: int) -> float:
        delay = float(initial) * (float(multiplier) ** max(attempt - 1, 0))
        if max_delay is not None:
            delay = min(delay, float(max_delay))
        return delay

    return _backoff


def _never(_: BaseException) -> bool:
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry loop around a single call.

    Only exceptions accepted by `retry_on` are retried; everything else
    propagates on the first failure. When attempts run out the last exception
    is re-raised unchanged.
    """

    max_attempts: int = 5
    backoff: Backoff = field(default_factory=lambda: exponential_backoff(2.0, 2.0, 30.0))
    retry_on: Callable[[BaseException], bool] = _never
    name: str = "upstream"
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def call(self, fn: Callable[..., R], *args, **kwargs) -> R:
        attempt = 0
        while True:
            attempt += 1
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                if not self.retry_on(e) or attempt >= self.max_attempts:
                    if attempt > 1:
                        logger.error(f"[RETRY] '{self.name}' gave up after {attempt} attempts: {e}")
                    raise
                delay = self.backoff(attempt)
                logger.warning(
                    f"[RETRY] Attempt #{attempt}/{self.max_attempts} for '{self.name}' failed - "
                    f"waiting {delay:.1f}s before next attempt. Reason: {e}"
                )
                self.sleep(delay)
                continue

            if attempt > 1:
                logger.info(f"[RETRY] '{self.name}' succeeded after {attempt} attempts")
            return result
