"""
Expiry Sweeper
==============
Periodic reclamation of expired codes, rate windows and handshake state.

Foreground reads already treat expired entries as absent, so sweeping only
bounds memory. A sweep that finds an entry already deleted by a verify or a
callback does nothing.
"""

import asyncio
from typing import Dict, Iterable, Optional

import structlog

from .storage import StateStore

logger = structlog.get_logger(__name__)

DEFAULT_SWEEP_INTERVAL = 60


class ExpirySweeper:
    """Runs ``StateStore.prune`` over a set of namespaces on an interval."""

    def __init__(
        self,
        store: StateStore,
        namespaces: Iterable[str],
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL,
    ):
        self.store = store
        self.namespaces = list(namespaces)
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> Dict[str, int]:
        """Prune every namespace once and return the number removed per namespace."""
        removed = {}
        for namespace in self.namespaces:
            removed[namespace] = await self.store.prune(namespace)

        total = sum(removed.values())
        if total:
            logger.info("Expired entries swept", removed=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception as e:
                # Keep the loop alive across transient store outages
                logger.error("Sweep failed", error=str(e), exc_info=True)

    def start(self) -> None:
        """Start the background task on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            "Expiry sweeper started",
            namespaces=self.namespaces,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")
