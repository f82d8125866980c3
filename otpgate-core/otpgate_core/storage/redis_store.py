"""
Redis State Store
=================
Shared store for deployments running more than one instance.
"""

import json
import time
import uuid
from typing import Any, Callable, Dict, Optional
import structlog
from redis.exceptions import NoScriptError

from .base import StateStore, WindowDecision
from .scripts import SLIDING_WINDOW_SCRIPT

logger = structlog.get_logger(__name__)


class RedisStateStore(StateStore):
    """
    Redis-backed state store.

    Values are JSON strings with a millisecond TTL, so Redis reclaims expired
    entries itself and ``prune`` has nothing to do. Sliding windows are
    sorted sets updated by a Lua script.
    """

    name = "redis"

    def __init__(
        self,
        redis_client,
        prefix: str = "otpgate",
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            redis_client: Async Redis client (``redis.asyncio.Redis``)
            prefix: Key prefix shared by all namespaces
            clock: Time source, epoch seconds
        """
        self.redis = redis_client
        self.prefix = prefix
        self._clock = clock
        self._script_sha: Optional[str] = None

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisStateStore":
        """Create a store from a ``redis://`` URL."""
        from redis.asyncio import Redis

        client = Redis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    def _key(self, namespace: str, key: str) -> str:
        return f"{self.prefix}:{namespace}:{key}"

    def _ttl_ms(self, expires_at: float) -> int:
        return max(1, int((expires_at - self._clock()) * 1000))

    async def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        raw = await self.redis.get(self._key(namespace, key))
        return json.loads(raw) if raw is not None else None

    async def set(
        self,
        namespace: str,
        key: str,
        value: Dict[str, Any],
        expires_at: float,
    ) -> None:
        await self.redis.set(
            self._key(namespace, key),
            json.dumps(value, separators=(',', ':')),
            px=self._ttl_ms(expires_at),
        )

    async def delete(self, namespace: str, key: str) -> bool:
        return bool(await self.redis.delete(self._key(namespace, key)))

    async def pop(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        raw = await self.redis.getdel(self._key(namespace, key))
        return json.loads(raw) if raw is not None else None

    async def prune(self, namespace: str) -> int:
        return 0

    async def _ensure_script(self) -> str:
        """Load Lua script into Redis if needed."""
        if self._script_sha is None:
            self._script_sha = await self.redis.script_load(SLIDING_WINDOW_SCRIPT)
        return self._script_sha

    async def hit_window(
        self,
        namespace: str,
        key: str,
        window_seconds: float,
        limit: int,
    ) -> WindowDecision:
        now = self._clock()
        args = (
            self._key(namespace, key),
            repr(now),
            window_seconds,
            limit,
            f"{now!r}:{uuid.uuid4().hex}",
        )

        script_sha = await self._ensure_script()
        try:
            result = await self.redis.evalsha(script_sha, 1, *args)
        except NoScriptError:
            # Script cache flushed on the server
            logger.warning("Sliding window script missing, reloading")
            self._script_sha = None
            script_sha = await self._ensure_script()
            result = await self.redis.evalsha(script_sha, 1, *args)

        allowed, count, oldest = result
        return WindowDecision(
            allowed=bool(int(allowed)),
            count=int(count),
            oldest=float(oldest) if oldest not in (None, "", b"") else None,
        )

    async def count(self, namespace: str) -> int:
        total = 0
        async for _ in self.redis.scan_iter(match=f"{self.prefix}:{namespace}:*"):
            total += 1
        return total

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error("Redis ping failed", error=str(e))
            return False

    async def close(self) -> None:
        await self.redis.aclose()
