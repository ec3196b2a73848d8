"""Domain entities - objects with identity and lifecycle."""

from .rate_limit_entry import RateLimitEntry

__all__ = [
    "RateLimitEntry",
]
