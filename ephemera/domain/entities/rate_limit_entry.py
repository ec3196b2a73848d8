"""Rate limit entry entity."""

import math
from dataclasses import dataclass


@dataclass(slots=True)
class RateLimitEntry:
    """Request counter for one `action:identifier` key within a fixed window.

    Times are clock seconds (float), as returned by `Clock.now()`.
    """

    count: int
    reset_time: float

    def is_expired(self, now: float) -> bool:
        """A window whose reset time has been reached is no longer valid."""
        return self.reset_time <= now

    def seconds_until_reset(self, now: float) -> int:
        """Whole seconds until the window resets, rounded up."""
        return max(0, math.ceil(self.reset_time - now))
