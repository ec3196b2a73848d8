"""Domain services - pure business logic operations."""

from .rate_limiter import Clock, FixedWindowRateLimiter, MonotonicClock
from .sanitizers import (
    sanitize_coordinate,
    sanitize_email,
    sanitize_file_extension,
    sanitize_single_line,
    sanitize_text,
    sanitize_username,
    sanitize_uuid,
)
from .schema_validator import FieldRule, Refinement, Schema, ValidationResult, validate
from .schemas import (
    AUTH_SCHEMA,
    MARKER_SCHEMA,
    MARKER_UPDATE_SCHEMA,
    PAGE_SCHEMA,
    PAGE_UPDATE_SCHEMA,
    RESERVED_USERNAMES,
    SIGN_IN_SCHEMA,
    SIGN_UP_SCHEMA,
    TIMELINE_SCHEMA,
    TIMELINE_UPDATE_SCHEMA,
    is_valid_uuid,
)
from .xss_detector import contains_dangerous_content, contains_xss_patterns

__all__ = [
    "FixedWindowRateLimiter",
    "Clock",
    "MonotonicClock",
    "sanitize_text",
    "sanitize_single_line",
    "sanitize_email",
    "sanitize_username",
    "sanitize_coordinate",
    "sanitize_uuid",
    "sanitize_file_extension",
    "contains_xss_patterns",
    "contains_dangerous_content",
    "FieldRule",
    "Refinement",
    "Schema",
    "ValidationResult",
    "validate",
    "AUTH_SCHEMA",
    "SIGN_IN_SCHEMA",
    "SIGN_UP_SCHEMA",
    "PAGE_SCHEMA",
    "PAGE_UPDATE_SCHEMA",
    "MARKER_SCHEMA",
    "MARKER_UPDATE_SCHEMA",
    "TIMELINE_SCHEMA",
    "TIMELINE_UPDATE_SCHEMA",
    "RESERVED_USERNAMES",
    "is_valid_uuid",
]
