"""Rate limit sweeper - periodic removal of expired limiter entries."""

import asyncio
import logging

from ephemera.domain import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = 300  # 5 minutes


class RateLimitSweeper:
    """Background task that keeps the limiter table bounded.

    Started and stopped by the application lifespan.
    """

    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        interval: float = SWEEP_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("Sweep interval must be positive")
        self._limiter = limiter
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop. Calling it again while running is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop())
        logger.debug("Rate limit sweeper started interval=%s", self._interval)

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
        logger.debug("Rate limit sweeper stopped")

    def sweep_once(self) -> int:
        return self._limiter.sweep()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception as e:
                logger.error("Rate limit sweep failed: %s", e)
