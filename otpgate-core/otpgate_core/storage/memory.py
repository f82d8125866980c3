"""
In-Memory State Store
=====================
Process-local store for single-instance deployments and tests.
"""

import copy
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
import structlog

from .base import StateStore, WindowDecision

logger = structlog.get_logger(__name__)


class InMemoryStateStore(StateStore):
    """
    Dict-backed state store.

    Nothing here awaits, so each operation completes without yielding to the
    event loop. Not shared across processes: multi-instance deployments need
    ``RedisStateStore``.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Dict[str, Tuple[Dict[str, Any], float]]] = {}
        # namespace -> key -> (hit timestamps, window span)
        self._windows: Dict[str, Dict[str, Tuple[List[float], float]]] = {}

    def _bucket(self, namespace: str) -> Dict[str, Tuple[Dict[str, Any], float]]:
        return self._entries.setdefault(namespace, {})

    async def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        bucket = self._bucket(namespace)
        entry = bucket.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            bucket.pop(key, None)
            return None

        # Callers mutate what they read; hand out a copy
        return copy.deepcopy(value)

    async def set(
        self,
        namespace: str,
        key: str,
        value: Dict[str, Any],
        expires_at: float,
    ) -> None:
        self._bucket(namespace)[key] = (copy.deepcopy(value), expires_at)

    async def delete(self, namespace: str, key: str) -> bool:
        return self._bucket(namespace).pop(key, None) is not None

    async def pop(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        entry = self._bucket(namespace).pop(key, None)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            return None
        return value

    async def prune(self, namespace: str) -> int:
        now = self._clock()
        removed = 0

        bucket = self._bucket(namespace)
        expired = [key for key, (_, expires_at) in bucket.items() if now >= expires_at]
        for key in expired:
            # Already gone if a foreground call deleted it meanwhile
            if bucket.pop(key, None) is not None:
                removed += 1

        windows = self._windows.get(namespace, {})
        # A window whose newest hit has aged out carries no state
        stale = [
            key for key, (hits, span) in windows.items()
            if not hits or hits[-1] <= now - span
        ]
        for key in stale:
            windows.pop(key, None)
            removed += 1

        if removed:
            logger.debug("Pruned expired entries", namespace=namespace, removed=removed)
        return removed

    async def hit_window(
        self,
        namespace: str,
        key: str,
        window_seconds: float,
        limit: int,
    ) -> WindowDecision:
        now = self._clock()
        window_start = now - window_seconds

        windows = self._windows.setdefault(namespace, {})
        previous, _ = windows.get(key, ([], window_seconds))
        hits = [ts for ts in previous if ts > window_start]

        if len(hits) >= limit:
            windows[key] = (hits, window_seconds)
            return WindowDecision(
                allowed=False,
                count=len(hits),
                oldest=hits[0] if hits else None,
            )

        hits.append(now)
        windows[key] = (hits, window_seconds)
        return WindowDecision(allowed=True, count=len(hits), oldest=hits[0])

    async def count(self, namespace: str) -> int:
        now = self._clock()
        live = sum(
            1 for _, expires_at in self._bucket(namespace).values()
            if now < expires_at
        )
        return live + len(self._windows.get(namespace, {}))
