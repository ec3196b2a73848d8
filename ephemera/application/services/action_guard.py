"""Action guard - rate limiting, XSS flagging and validation shared by every action."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ephemera.domain import (
    RATE_LIMITS,
    AuthUser,
    FixedWindowRateLimiter,
    NotAuthenticatedError,
    RateLimitConfig,
    Schema,
    ValidationResult,
    contains_xss_patterns,
    rate_limit_error,
    validate,
)

from .audit_service import AuditLogger, mask_email

logger = logging.getLogger(__name__)

# Raw values of these fields never reach an audit event
SECRET_FIELDS = frozenset({"password"})


def audit_safe_input(field: str | None, raw: Any) -> str | None:
    """Raw field value as it may appear in an audit preview.

    Secrets are dropped and emails are masked; non-strings yield None.
    """
    if not isinstance(raw, str) or field in SECRET_FIELDS:
        return None
    if field == "email":
        return mask_email(raw)
    return raw


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Who is calling and from where."""

    ip: str = "unknown"
    user_agent: str | None = None
    user: AuthUser | None = None
    access_token: str | None = None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a user action: an error message or the produced data."""

    error: str | None = None
    data: Any = None
    rate_limited: bool = False
    retry_after: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "ActionResult":
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> "ActionResult":
        return cls(error=error)


def require_user(ctx: RequestContext) -> AuthUser:
    """Return the signed-in user or raise NotAuthenticatedError."""
    if ctx.user is None:
        raise NotAuthenticatedError()
    return ctx.user


class ActionGuard:
    """Checks every mutating action runs before touching the backend."""

    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        audit: AuditLogger,
        enabled: bool = True,
    ) -> None:
        self._limiter = limiter
        self._audit = audit
        self._enabled = enabled

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @property
    def limiter(self) -> FixedWindowRateLimiter:
        return self._limiter

    def check_rate_limit(
        self,
        action: str,
        identifier: str,
        preset: str | RateLimitConfig,
        ctx: RequestContext,
    ) -> ActionResult | None:
        """Count the request against `action:identifier`.

        Returns:
            A rate-limited ActionResult when the limit is exceeded, None otherwise.
        """
        if not self._enabled:
            return None

        config = RATE_LIMITS[preset] if isinstance(preset, str) else preset
        result = self._limiter.check(identifier, action, config)
        if result.success:
            return None

        logger.info("Rate limit exceeded action=%s identifier=%s", action, identifier)
        self._audit.log_rate_limit_exceeded(action, identifier=identifier, ip=ctx.ip)
        return ActionResult(
            error=rate_limit_error(result.reset_in_seconds),
            rate_limited=True,
            retry_after=result.reset_in_seconds,
        )

    def flag_xss(self, fields: Mapping[str, Any], ctx: RequestContext) -> list[str]:
        """Audit every raw string field carrying an XSS pattern.

        Flagging never blocks the action; sanitization and validation do.

        Returns:
            Names of the flagged fields.
        """
        flagged = []
        for name, raw in fields.items():
            if isinstance(raw, str) and contains_xss_patterns(raw):
                flagged.append(name)
                self._audit.log_xss_attempt(
                    name,
                    raw_input=audit_safe_input(name, raw) or "",
                    user_id=ctx.user_id,
                    ip=ctx.ip,
                )
        return flagged

    def validate(
        self,
        action: str,
        schema: Schema,
        payload: Mapping[str, Any],
        ctx: RequestContext,
    ) -> ValidationResult:
        """Validate the sanitized payload, auditing the first issue on failure."""
        result = validate(schema, payload)
        if not result.ok:
            issue = result.first_issue
            self._audit.log_validation_failure(
                action,
                user_id=ctx.user_id,
                ip=ctx.ip,
                field=issue.field,
                reason=issue.message,
                raw_input=audit_safe_input(issue.field, payload.get(issue.field)),
            )
        return result

    def reject(
        self,
        action: str,
        message: str,
        ctx: RequestContext,
        *,
        field: str | None = None,
        raw_input: str | None = None,
    ) -> ActionResult:
        """Audit a validation failure found outside a schema and return it."""
        self._audit.log_validation_failure(
            action,
            user_id=ctx.user_id,
            ip=ctx.ip,
            field=field,
            reason=message,
            raw_input=audit_safe_input(field, raw_input),
        )
        return ActionResult.failure(message)
