"""Sliding-window rate limiter for provider calls."""

import math
import time
from collections import deque
from typing import Callable

from loguru import logger
from pydantic import BaseModel

from saligo.errors import ErrorCode, SaligoError

WINDOW_SECONDS = 60.0
DEFAULT_MAX_REQUESTS = 60


class RateLimitWindow(BaseModel):
    requests: list[float]
    is_limited: bool = False
    reset_at: float | None = None


class SlidingWindowRateLimiter:
    """Fail-fast limiter over a rolling 60-second window.

    Unlike a waiting limiter, a full window raises immediately so that no
    call is queued behind the limit.
    """

    def __init__(
        self,
        *,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = WINDOW_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.clock = clock
        self._requests: deque[float] = deque()
        self._is_limited = False
        self._reset_at: float | None = None

    def check(self) -> None:
        """Record a request, or raise RATE_LIMIT_EXCEEDED when the window is full."""
        if not self.enabled:
            return

        now = self.clock()
        self._prune(now)

        if len(self._requests) >= self.max_requests:
            self._is_limited = True
            self._reset_at = self._requests[0] + self.window_seconds
            retry_after = max(0.0, self._reset_at - now)
            logger.warning(
                f"Rate limit of {self.max_requests} requests per minute reached, "
                f"resets in {retry_after:.1f}s"
            )
            raise SaligoError(
                ErrorCode.RATE_LIMIT_EXCEEDED,
                f"Rate limit exceeded. Try again in {math.ceil(retry_after)} seconds.",
                retry_after=retry_after,
                details={"limit": self.max_requests},
            )

        self._requests.append(now)
        self._is_limited = False
        self._reset_at = None

    @property
    def window(self) -> RateLimitWindow:
        return RateLimitWindow(
            requests=list(self._requests), is_limited=self._is_limited, reset_at=self._reset_at
        )

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()
