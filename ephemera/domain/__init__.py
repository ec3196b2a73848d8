"""Pure domain layer - no infrastructure dependencies."""

# Entities
from .entities import RateLimitEntry

# Errors
from .errors import BackendError, EphemeraError, NotAuthenticatedError

# Ports
from .ports import AuditSink, BackendPort

# Services
from .services import (
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
    Clock,
    FieldRule,
    FixedWindowRateLimiter,
    MonotonicClock,
    Refinement,
    Schema,
    ValidationResult,
    contains_dangerous_content,
    contains_xss_patterns,
    is_valid_uuid,
    sanitize_coordinate,
    sanitize_email,
    sanitize_file_extension,
    sanitize_single_line,
    sanitize_text,
    sanitize_username,
    sanitize_uuid,
    validate,
)

# Value Objects
from .values import (
    RATE_LIMITS,
    AuditEvent,
    AuditEventKind,
    AuthSession,
    AuthUser,
    RateLimitConfig,
    RateLimitResult,
    ValidationIssue,
    Visibility,
    rate_limit_error,
)

__all__ = [
    # Values
    "RateLimitConfig",
    "RateLimitResult",
    "RATE_LIMITS",
    "rate_limit_error",
    "ValidationIssue",
    "AuditEvent",
    "AuditEventKind",
    "AuthUser",
    "AuthSession",
    "Visibility",
    # Entities
    "RateLimitEntry",
    # Errors
    "EphemeraError",
    "NotAuthenticatedError",
    "BackendError",
    # Services
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
    # Ports
    "AuditSink",
    "BackendPort",
]
