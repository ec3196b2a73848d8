"""Timeline service - user collections of pages."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ephemera.domain import (
    TIMELINE_SCHEMA,
    TIMELINE_UPDATE_SCHEMA,
    BackendError,
    BackendPort,
    is_valid_uuid,
    sanitize_single_line,
    sanitize_text,
)

from .action_guard import ActionGuard, ActionResult, RequestContext, require_user
from .tables import PAGE_TIMELINES_TABLE, PAGES_TABLE, TIMELINES_TABLE

logger = logging.getLogger(__name__)


def _sanitize_timeline(payload: Mapping[str, Any]) -> dict[str, Any]:
    description = payload.get("description")
    return {
        "name": sanitize_single_line(payload.get("name")),
        "description": (sanitize_text(description) or None) if description else None,
        "color": payload.get("color"),
        "icon": payload.get("icon"),
        "visibility": payload.get("visibility"),
    }


class TimelineService:
    """Timeline actions and page-to-timeline assignment."""

    def __init__(self, backend: BackendPort, guard: ActionGuard) -> None:
        self._backend = backend
        self._guard = guard

    def create_timeline(self, payload: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("timeline.create", user.id, "create", ctx)
        if limited:
            return limited

        sanitized = _sanitize_timeline(payload)
        self._guard.flag_xss(
            {"name": payload.get("name"), "description": payload.get("description")}, ctx
        )

        parsed = self._guard.validate("timeline.create", TIMELINE_SCHEMA, sanitized, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)

        try:
            rows = self._backend.insert(TIMELINES_TABLE, [{**parsed.value, "user_id": user.id}])
        except BackendError as e:
            return ActionResult.failure(e.message)

        timeline = rows[0]
        self._guard.audit.log_data_change(
            "create", "timeline", user_id=user.id, resource_id=timeline["id"], ip=ctx.ip
        )
        return ActionResult.success(timeline)

    def update_timeline(self, payload: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("timeline.update", user.id, "modify", ctx)
        if limited:
            return limited

        sanitized = {"id": payload.get("id"), **_sanitize_timeline(payload)}
        self._guard.flag_xss(
            {"name": payload.get("name"), "description": payload.get("description")}, ctx
        )

        parsed = self._guard.validate("timeline.update", TIMELINE_UPDATE_SCHEMA, sanitized, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)
        value = dict(parsed.value)
        timeline_id = value.pop("id")

        try:
            updated = self._backend.update(
                TIMELINES_TABLE, value, {"id": timeline_id, "user_id": user.id}
            )
        except BackendError as e:
            return ActionResult.failure(e.message)
        if not updated:
            return ActionResult.failure("Timeline not found")

        self._guard.audit.log_data_change(
            "update", "timeline", user_id=user.id, resource_id=timeline_id, ip=ctx.ip
        )
        return ActionResult.success({"id": timeline_id, **value})

    def delete_timeline(self, timeline_id: str | None, ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("timeline.delete", user.id, "modify", ctx)
        if limited:
            return limited

        if not is_valid_uuid(timeline_id):
            return self._guard.reject("timeline.delete", "Invalid timeline ID", ctx, field="id")
        timeline_id = timeline_id.lower()

        try:
            deleted = self._backend.delete(
                TIMELINES_TABLE, {"id": timeline_id, "user_id": user.id}
            )
            if deleted:
                self._backend.delete(PAGE_TIMELINES_TABLE, {"timeline_id": timeline_id})
        except BackendError as e:
            return ActionResult.failure(e.message)
        if not deleted:
            return ActionResult.failure("Timeline not found")

        self._guard.audit.log_data_change(
            "delete", "timeline", user_id=user.id, resource_id=timeline_id, ip=ctx.ip
        )
        return ActionResult.success({"id": timeline_id})

    def assign_page_to_timelines(
        self,
        page_id: str | None,
        timeline_ids: Sequence[str],
        ctx: RequestContext,
    ) -> ActionResult:
        """Replace the set of timelines a page belongs to."""
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("timeline.assign", user.id, "modify", ctx)
        if limited:
            return limited

        if not is_valid_uuid(page_id):
            return self._guard.reject("timeline.assign", "Invalid page ID", ctx, field="page_id")
        for timeline_id in timeline_ids:
            if not is_valid_uuid(timeline_id):
                return self._guard.reject(
                    "timeline.assign",
                    "Invalid timeline ID",
                    ctx,
                    field="timeline_ids",
                    raw_input=str(timeline_id),
                )

        page_id = page_id.lower()
        # Keep first occurrence order, drop duplicates
        wanted = list(dict.fromkeys(t.lower() for t in timeline_ids))

        try:
            if not self._backend.select(PAGES_TABLE, {"id": page_id, "user_id": user.id}):
                return ActionResult.failure("Page not found")
            for timeline_id in wanted:
                if not self._backend.select(
                    TIMELINES_TABLE, {"id": timeline_id, "user_id": user.id}
                ):
                    return ActionResult.failure("Timeline not found")

            self._backend.delete(PAGE_TIMELINES_TABLE, {"page_id": page_id})
            if wanted:
                self._backend.insert(
                    PAGE_TIMELINES_TABLE,
                    [{"page_id": page_id, "timeline_id": t} for t in wanted],
                )
        except BackendError as e:
            return ActionResult.failure(e.message)

        self._guard.audit.log_data_change(
            "update",
            "page_timelines",
            user_id=user.id,
            resource_id=page_id,
            ip=ctx.ip,
            details={"timeline_ids": wanted},
        )
        return ActionResult.success({"page_id": page_id, "timeline_ids": wanted})

    def get_timelines_for_page(self, page_id: str | None, ctx: RequestContext) -> ActionResult:
        """Ids of the timelines the user's page is assigned to."""
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("timeline.read", user.id, "read", ctx)
        if limited:
            return limited

        if not is_valid_uuid(page_id):
            return ActionResult.failure("Invalid page ID")
        page_id = page_id.lower()

        try:
            if not self._backend.select(PAGES_TABLE, {"id": page_id, "user_id": user.id}):
                return ActionResult.failure("Page not found")
            rows = self._backend.select(PAGE_TIMELINES_TABLE, {"page_id": page_id})
        except BackendError as e:
            return ActionResult.failure(e.message)
        return ActionResult.success([row["timeline_id"] for row in rows])
