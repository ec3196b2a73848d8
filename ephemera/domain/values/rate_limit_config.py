"""Rate limit configuration value object."""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Fixed-window rate limiting configuration (value object)."""

    limit: int
    window_seconds: int

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("Limit must be positive")
        if self.window_seconds <= 0:
            raise ValueError("Window must be positive")


# Preset configurations per action class
RATE_LIMITS: MappingProxyType[str, RateLimitConfig] = MappingProxyType(
    {
        # Login / signup - strict to deter brute force
        "auth": RateLimitConfig(limit=5, window_seconds=60),
        # New page, new marker, new timeline
        "create": RateLimitConfig(limit=10, window_seconds=60),
        # Update / delete
        "modify": RateLimitConfig(limit=20, window_seconds=60),
        "read": RateLimitConfig(limit=100, window_seconds=60),
    }
)


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of a single rate limit check."""

    success: bool
    remaining: int
    reset_in_seconds: int


def rate_limit_error(reset_in_seconds: int) -> str:
    """User-facing message for a rejected request."""
    return f"Too many requests. Please try again in {reset_in_seconds} seconds."
