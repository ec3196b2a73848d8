"""Audit event value objects."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class AuditEventKind(StrEnum):
    """Security-relevant event kinds."""

    SIGNIN_ATTEMPT = "auth.signin.attempt"
    SIGNIN_SUCCESS = "auth.signin.success"
    SIGNIN_FAILURE = "auth.signin.failure"
    SIGNUP_ATTEMPT = "auth.signup.attempt"
    SIGNUP_SUCCESS = "auth.signup.success"
    SIGNUP_FAILURE = "auth.signup.failure"
    SIGNOUT = "auth.signout"
    PAGE_CREATE = "page.create"
    PAGE_UPDATE = "page.update"
    PAGE_DELETE = "page.delete"
    MARKER_CREATE = "marker.create"
    MARKER_UPDATE = "marker.update"
    MARKER_DELETE = "marker.delete"
    TIMELINE_CREATE = "timeline.create"
    TIMELINE_UPDATE = "timeline.update"
    TIMELINE_DELETE = "timeline.delete"
    PAGE_TIMELINES_CREATE = "page_timelines.create"
    PAGE_TIMELINES_UPDATE = "page_timelines.update"
    PAGE_TIMELINES_DELETE = "page_timelines.delete"
    VALIDATION_FAILURE = "validation.failure"
    RATELIMIT_EXCEEDED = "ratelimit.exceeded"
    XSS_ATTEMPT = "security.xss_attempt"


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """Write-only audit record forwarded to an AuditSink."""

    timestamp: datetime
    event: AuditEventKind
    success: bool = True
    user_id: str | None = None
    ip: str = "unknown"
    user_agent: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation."""
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "event": str(self.event),
            "userId": self.user_id,
            "ip": self.ip,
            "success": self.success,
        }
        if self.user_agent is not None:
            data["userAgent"] = self.user_agent
        if self.details:
            data["details"] = dict(self.details)
        return data
