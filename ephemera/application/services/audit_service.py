"""Audit service - builds security audit events and hands them to a sink."""

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from ephemera.domain import AuditEvent, AuditEventKind, AuditSink

logger = logging.getLogger(__name__)

XSS_PREVIEW_LENGTH = 200
RAW_INPUT_PREVIEW_LENGTH = 100


def mask_email(email: str) -> str:
    """Mask an email for logs: user@example.com -> u***r@example.com."""
    local, _, domain = email.partition("@")
    domain = domain.split("@", 1)[0]
    if not local or not domain:
        return "***@***"

    if len(local) > 2:
        masked_local = f"{local[0]}***{local[-1]}"
    else:
        masked_local = f"{local[0]}***"
    return f"{masked_local}@{domain}"


def escape_preview(raw_input: str, length: int = XSS_PREVIEW_LENGTH) -> str:
    """Truncated preview with angle brackets escaped, safe to write to logs."""
    return raw_input[:length].replace("<", "&lt;").replace(">", "&gt;")


class AuditLogger:
    """Emit audit events for security-relevant actions.

    Emission is fire-and-forget: a failing sink is logged and never
    interrupts the action being audited.
    """

    def __init__(
        self,
        sink: AuditSink,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._sink = sink
        self._now = now or (lambda: datetime.now(UTC))

    def log_event(
        self,
        kind: AuditEventKind,
        *,
        user_id: str | None = None,
        ip: str | None = None,
        user_agent: str | None = None,
        details: Mapping[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        event = AuditEvent(
            timestamp=self._now(),
            event=kind,
            success=success,
            user_id=user_id,
            ip=ip or "unknown",
            user_agent=user_agent,
            details={k: v for k, v in (details or {}).items() if v is not None},
        )
        try:
            self._sink.emit(event)
        except Exception:
            logger.exception("Audit sink failed event=%s", kind)

    def log_auth_attempt(
        self,
        action: Literal["signin", "signup"],
        *,
        email: str,
        success: bool,
        ip: str | None = None,
        user_agent: str | None = None,
        error: str | None = None,
    ) -> None:
        outcome = "success" if success else "failure"
        self.log_event(
            AuditEventKind(f"auth.{action}.{outcome}"),
            ip=ip,
            user_agent=user_agent,
            details={"email": mask_email(email), "error": error},
            success=success,
        )

    def log_sign_out(self, *, user_id: str, ip: str | None = None) -> None:
        self.log_event(AuditEventKind.SIGNOUT, user_id=user_id, ip=ip)

    def log_validation_failure(
        self,
        action: str,
        *,
        user_id: str | None = None,
        ip: str | None = None,
        field: str | None = None,
        reason: str | None = None,
        raw_input: str | None = None,
    ) -> None:
        preview = escape_preview(raw_input, RAW_INPUT_PREVIEW_LENGTH) if raw_input else None
        self.log_event(
            AuditEventKind.VALIDATION_FAILURE,
            user_id=user_id,
            ip=ip,
            details={
                "action": action,
                "field": field,
                "reason": reason,
                "rawInputPreview": preview,
            },
            success=False,
        )

    def log_rate_limit_exceeded(
        self,
        action: str,
        *,
        identifier: str,
        ip: str | None = None,
    ) -> None:
        self.log_event(
            AuditEventKind.RATELIMIT_EXCEEDED,
            ip=ip,
            details={"action": action, "identifier": identifier},
            success=False,
        )

    def log_xss_attempt(
        self,
        field: str,
        *,
        raw_input: str,
        user_id: str | None = None,
        ip: str | None = None,
    ) -> None:
        self.log_event(
            AuditEventKind.XSS_ATTEMPT,
            user_id=user_id,
            ip=ip,
            details={"field": field, "inputPreview": escape_preview(raw_input)},
            success=False,
        )

    def log_data_change(
        self,
        action: Literal["create", "update", "delete"],
        resource: Literal["page", "marker", "timeline", "page_timelines"],
        *,
        user_id: str,
        resource_id: str,
        ip: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        self.log_event(
            AuditEventKind(f"{resource}.{action}"),
            user_id=user_id,
            ip=ip,
            details={"resourceId": resource_id, **(details or {})},
        )
