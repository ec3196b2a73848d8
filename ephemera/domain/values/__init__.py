"""Domain value objects - immutable data structures."""

from .audit_event import AuditEvent, AuditEventKind
from .auth_user import AuthSession, AuthUser
from .rate_limit_config import RATE_LIMITS, RateLimitConfig, RateLimitResult, rate_limit_error
from .validation_issue import ValidationIssue
from .visibility import Visibility

__all__ = [
    "RateLimitConfig",
    "RateLimitResult",
    "RATE_LIMITS",
    "rate_limit_error",
    "ValidationIssue",
    "AuditEvent",
    "AuditEventKind",
    "Visibility",
    "AuthUser",
    "AuthSession",
]
