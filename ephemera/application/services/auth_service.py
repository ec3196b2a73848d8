"""Auth service - sign in, sign up and sign out."""

import logging
from collections.abc import Mapping
from typing import Any

from ephemera.domain import (
    SIGN_IN_SCHEMA,
    SIGN_UP_SCHEMA,
    AuthUser,
    BackendError,
    BackendPort,
    sanitize_email,
    sanitize_single_line,
    sanitize_username,
)

from .action_guard import ActionGuard, ActionResult, RequestContext, require_user

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication actions, rate limited per client IP."""

    def __init__(self, backend: BackendPort, guard: ActionGuard) -> None:
        self._backend = backend
        self._guard = guard

    def sign_in(self, form: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        limited = self._guard.check_rate_limit("auth.signin", ctx.ip, "auth", ctx)
        if limited:
            return limited

        raw_email = form.get("email")
        email = sanitize_email(raw_email)
        self._guard.flag_xss({"email": raw_email}, ctx)

        parsed = self._guard.validate(
            "auth.signin",
            SIGN_IN_SCHEMA,
            {"email": email, "password": form.get("password")},
            ctx,
        )
        if not parsed.ok:
            self._audit_attempt("signin", email, ctx, success=False, error="validation")
            return ActionResult.failure(parsed.error)

        try:
            session = self._backend.sign_in(parsed.value["email"], parsed.value["password"])
        except BackendError as e:
            self._audit_attempt("signin", email, ctx, success=False, error=e.message)
            return ActionResult.failure(e.message)

        self._audit_attempt("signin", email, ctx, success=True)
        return ActionResult.success(session)

    def sign_up(self, form: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        limited = self._guard.check_rate_limit("auth.signup", ctx.ip, "auth", ctx)
        if limited:
            return limited

        raw_email = form.get("email")
        raw_username = form.get("username")
        raw_display_name = form.get("display_name")

        payload = {
            "email": sanitize_email(raw_email),
            "password": form.get("password"),
            "username": sanitize_username(raw_username),
            "display_name": sanitize_single_line(raw_display_name) or None,
        }
        self._guard.flag_xss(
            {"email": raw_email, "username": raw_username, "display_name": raw_display_name},
            ctx,
        )

        parsed = self._guard.validate("auth.signup", SIGN_UP_SCHEMA, payload, ctx)
        if not parsed.ok:
            self._audit_attempt(
                "signup", payload["email"], ctx, success=False, error="validation"
            )
            return ActionResult.failure(parsed.error)

        value = parsed.value
        metadata = {"username": value["username"]}
        if value.get("display_name"):
            metadata["display_name"] = value["display_name"]

        try:
            user = self._backend.sign_up(value["email"], value["password"], metadata)
        except BackendError as e:
            self._audit_attempt("signup", value["email"], ctx, success=False, error=e.message)
            return ActionResult.failure(e.message)

        self._audit_attempt("signup", value["email"], ctx, success=True)
        logger.info("User signed up user_id=%s", user.id)
        return ActionResult.success(user)

    def sign_out(self, ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)
        if ctx.access_token:
            try:
                self._backend.sign_out(ctx.access_token)
            except BackendError as e:
                return ActionResult.failure(e.message)

        self._guard.audit.log_sign_out(user_id=user.id, ip=ctx.ip)
        return ActionResult.success()

    def current_user(self, access_token: str | None) -> AuthUser | None:
        """Resolve a bearer token to its user, None when absent or unknown."""
        if not access_token:
            return None
        return self._backend.get_user(access_token)

    def _audit_attempt(
        self,
        action: str,
        email: str,
        ctx: RequestContext,
        *,
        success: bool,
        error: str | None = None,
    ) -> None:
        self._guard.audit.log_auth_attempt(
            action,
            email=email,
            success=success,
            ip=ctx.ip,
            user_agent=ctx.user_agent,
            error=error,
        )
