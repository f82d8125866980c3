"""
State Store Interface
=====================
Keyed, expiring storage shared by the OTP ledger, the rate limiter and the
federation handshake manager.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class WindowDecision:
    """Outcome of an atomic sliding-window hit."""
    allowed: bool
    count: int  # Entries in the window after the hit
    oldest: Optional[float] = None  # Oldest timestamp still in the window


class StateStore(ABC):
    """
    Abstract keyed store with passive expiry.

    Entries are grouped by ``namespace``. Every entry carries a reclamation
    deadline (``expires_at``, epoch seconds); a read past that deadline
    behaves as if the entry were absent. Deletes are idempotent.
    """

    name: str = "base"

    @abstractmethod
    async def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value or None if absent or expired."""

    @abstractmethod
    async def set(
        self,
        namespace: str,
        key: str,
        value: Dict[str, Any],
        expires_at: float,
    ) -> None:
        """Store ``value`` under ``key``, overwriting any prior entry."""

    @abstractmethod
    async def delete(self, namespace: str, key: str) -> bool:
        """Remove an entry. Returns True if something was removed."""

    @abstractmethod
    async def pop(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        """Atomically read and remove an entry."""

    @abstractmethod
    async def prune(self, namespace: str) -> int:
        """Drop expired entries in ``namespace``. Returns the number removed."""

    @abstractmethod
    async def hit_window(
        self,
        namespace: str,
        key: str,
        window_seconds: float,
        limit: int,
    ) -> WindowDecision:
        """
        Record a hit in a sliding window if capacity remains.

        Entries at or before ``now - window_seconds`` are discarded first.
        When ``limit`` entries remain the hit is rejected and nothing is
        recorded; otherwise ``now`` is appended. Check and append are atomic
        per key.
        """

    @abstractmethod
    async def count(self, namespace: str) -> int:
        """Number of live entries in ``namespace``."""

    async def ping(self) -> bool:
        """Check backend connectivity."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
