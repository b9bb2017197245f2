"""Periodic maintenance sweep for the QR cache."""

import asyncio

from ..core.logging_config import get_logger
from .store import QRCacheStore

logger = get_logger(__name__)

DEFAULT_SWEEP_INTERVAL = 300.0


class CacheSweeper:
    """Runs ``QRCacheStore.sweep`` on a fixed interval in the event loop."""

    def __init__(self, store: QRCacheStore, interval: float = DEFAULT_SWEEP_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.store = store
        self.interval = interval
        self.passes = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="qr-cache-sweeper")
        logger.info("sweeper_started", interval=self.interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("sweeper_stopped", passes=self.passes)

    def run_once(self) -> int:
        """Perform a single sweep pass."""
        evicted = self.store.sweep()
        self.passes += 1
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except Exception as e:
                logger.error("sweeper_pass_failed", error=str(e))
