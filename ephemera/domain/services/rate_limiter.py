"""Fixed-window rate limiter."""

import logging
import threading
import time
from typing import Protocol

from ..entities import RateLimitEntry
from ..values import RateLimitConfig, RateLimitResult

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Clock interface for testability."""

    def now(self) -> float:
        """Get current time in seconds."""
        ...


class MonotonicClock:
    """Clock backed by time.monotonic, immune to wall-clock jumps."""

    def now(self) -> float:
        return time.monotonic()


class FixedWindowRateLimiter:
    """Per `action:identifier` request counter with fixed windows.

    Pure domain logic over an in-process table. Limits are per process:
    several workers or instances each keep their own counts.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or MonotonicClock()
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(identifier: str, action: str) -> str:
        return f"{action}:{identifier}"

    def check(self, identifier: str, action: str, config: RateLimitConfig) -> RateLimitResult:
        """Count one request and report whether it is allowed.

        The read-decide-write sequence runs under the lock so concurrent
        requests on the same key cannot both take the last slot.
        """
        key = self.make_key(identifier, action)

        with self._lock:
            now = self._clock.now()
            entry = self._entries.get(key)

            # Absent, or stale entry the sweep has not removed yet
            if entry is None or entry.is_expired(now):
                self._entries[key] = RateLimitEntry(count=1, reset_time=now + config.window_seconds)
                return RateLimitResult(
                    success=True,
                    remaining=config.limit - 1,
                    reset_in_seconds=config.window_seconds,
                )

            if entry.count >= config.limit:
                return RateLimitResult(
                    success=False,
                    remaining=0,
                    reset_in_seconds=entry.seconds_until_reset(now),
                )

            entry.count += 1
            return RateLimitResult(
                success=True,
                remaining=config.limit - entry.count,
                reset_in_seconds=entry.seconds_until_reset(now),
            )

    def reset(self, identifier: str, action: str) -> None:
        """Forget the counter for one key (admin override)."""
        with self._lock:
            self._entries.pop(self.make_key(identifier, action), None)

    def clear(self) -> None:
        """Forget every counter. Test isolation only."""
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Drop expired entries.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock.now()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug("Rate limit sweep removed=%d remaining=%d", len(expired), len(self))
        return len(expired)

    def get_entry(self, identifier: str, action: str) -> RateLimitEntry | None:
        with self._lock:
            return self._entries.get(self.make_key(identifier, action))

    def __len__(self) -> int:
        return len(self._entries)
