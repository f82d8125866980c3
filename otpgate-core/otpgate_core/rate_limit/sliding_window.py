"""
Sliding Window Rate Limiter
===========================
Per-identifier admission control for code requests.
"""

import math
import time
from typing import Callable

import structlog

from ..storage import StateStore
from .models import RateLimitInfo

logger = structlog.get_logger(__name__)

DEFAULT_RATE = 5
DEFAULT_WINDOW_SECONDS = 15 * 60


class SlidingWindowLimiter:
    """
    Sliding window rate limiter over a ``StateStore``.

    Keeps the timestamps of admitted requests per key. A rejected request is
    not recorded, so it does not push the window forward.
    """

    namespace = "ratelimit"

    def __init__(
        self,
        store: StateStore,
        rate: int = DEFAULT_RATE,
        window: int = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            store: Backing state store
            rate: Admissions allowed per window
            window: Window size in seconds
            clock: Time source, epoch seconds
        """
        self.store = store
        self.rate = rate
        self.window = window
        self._clock = clock

    async def check(self, key: str) -> RateLimitInfo:
        """Admit or reject one request for ``key`` with quota details."""
        decision = await self.store.hit_window(
            self.namespace, key, self.window, self.rate,
        )
        now = self._clock()
        oldest = decision.oldest if decision.oldest is not None else now
        reset_at = int(math.ceil(oldest + self.window))

        if not decision.allowed:
            retry_after = max(1, int(math.ceil(oldest + self.window - now)))
            logger.warning(
                "Rate limit exceeded",
                key_prefix=key.split(":", 1)[0],
                count=decision.count,
                retry_after=retry_after,
            )
            return RateLimitInfo(
                key=key,
                allowed=False,
                remaining=0,
                limit=self.rate,
                reset_at=reset_at,
                retry_after=retry_after,
            )

        return RateLimitInfo(
            key=key,
            allowed=True,
            remaining=max(0, self.rate - decision.count),
            limit=self.rate,
            reset_at=reset_at,
        )

    async def admit(self, key: str) -> bool:
        """Return True and record the request if ``key`` is under its cap."""
        info = await self.check(key)
        return info.allowed

    async def sweep(self) -> int:
        """Reclaim windows with no hits left inside them."""
        return await self.store.prune(self.namespace)
