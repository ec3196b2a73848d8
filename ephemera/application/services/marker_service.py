"""Marker service - annotation points placed on a page image."""

import logging
from collections.abc import Mapping
from typing import Any

from ephemera.domain import (
    MARKER_SCHEMA,
    MARKER_UPDATE_SCHEMA,
    AuthUser,
    BackendError,
    BackendPort,
    is_valid_uuid,
    sanitize_coordinate,
    sanitize_single_line,
    sanitize_text,
)

from .action_guard import ActionGuard, ActionResult, RequestContext, require_user
from .tables import MARKERS_TABLE, PAGES_TABLE

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("label", "note", "category", "source_location")
# Fields a marker update may clear by sending an empty value
CLEARABLE_FIELDS = ("note", "category", "source_date", "source_location")


def _sanitize_marker(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize the marker fields present in the payload."""
    sanitizers = {
        "label": sanitize_single_line,
        "note": sanitize_text,
        "category": sanitize_single_line,
        "source_location": sanitize_single_line,
    }
    sanitized: dict[str, Any] = {}
    for name in ("page_id", "id", "source_date"):
        if name in payload:
            sanitized[name] = payload[name]
    for name in ("x", "y"):
        if name in payload:
            sanitized[name] = sanitize_coordinate(payload[name])
    for name, sanitize in sanitizers.items():
        raw = payload.get(name)
        if name == "label" and name in payload:
            sanitized[name] = sanitize(raw)
        elif raw:
            sanitized[name] = sanitize(raw) or None
    return sanitized


class MarkerService:
    """Marker actions. Markers belong to a page owned by the acting user."""

    def __init__(self, backend: BackendPort, guard: ActionGuard) -> None:
        self._backend = backend
        self._guard = guard

    def create_marker(self, payload: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("marker.create", user.id, "create", ctx)
        if limited:
            return limited

        sanitized = _sanitize_marker(payload)
        # Coordinates are always required on create
        sanitized.setdefault("x", None)
        sanitized.setdefault("y", None)
        self._guard.flag_xss({name: payload.get(name) for name in TEXT_FIELDS}, ctx)

        parsed = self._guard.validate("marker.create", MARKER_SCHEMA, sanitized, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)
        value = parsed.value

        try:
            if not self._owns_page(user, value["page_id"]):
                return ActionResult.failure("Page not found")
            rows = self._backend.insert(MARKERS_TABLE, [value])
        except BackendError as e:
            return ActionResult.failure(e.message)

        marker_id = rows[0]["id"]
        self._guard.audit.log_data_change(
            "create",
            "marker",
            user_id=user.id,
            resource_id=marker_id,
            ip=ctx.ip,
            details={"pageId": value["page_id"]},
        )
        return ActionResult.success({"id": marker_id})

    def update_marker(self, payload: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        """Apply a partial update; only fields present in the payload change."""
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("marker.update", user.id, "modify", ctx)
        if limited:
            return limited

        if not is_valid_uuid(payload.get("id")) or not is_valid_uuid(payload.get("page_id")):
            return self._guard.reject("marker.update", "Invalid marker or page ID", ctx, field="id")

        sanitized = _sanitize_marker(payload)
        for axis in ("x", "y"):
            if axis in payload and sanitized[axis] is None:
                return self._guard.reject(
                    "marker.update",
                    f"{axis.upper()} must be a finite number",
                    ctx,
                    field=axis,
                    raw_input=str(payload[axis]),
                )
        self._guard.flag_xss(
            {name: payload.get(name) for name in TEXT_FIELDS if name in payload}, ctx
        )

        parsed = self._guard.validate("marker.update", MARKER_UPDATE_SCHEMA, sanitized, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)
        value = dict(parsed.value)

        marker_id = value.pop("id")
        page_id = value.pop("page_id")
        for name in CLEARABLE_FIELDS:
            if name in payload and name not in value:
                value[name] = None

        if not value:
            return ActionResult.success({"id": marker_id})

        try:
            if not self._owns_page(user, page_id):
                return ActionResult.failure("Page not found")
            updated = self._backend.update(
                MARKERS_TABLE, value, {"id": marker_id, "page_id": page_id}
            )
        except BackendError as e:
            return ActionResult.failure(e.message)
        if not updated:
            return ActionResult.failure("Marker not found")

        self._guard.audit.log_data_change(
            "update",
            "marker",
            user_id=user.id,
            resource_id=marker_id,
            ip=ctx.ip,
            details={"fields": sorted(value)},
        )
        return ActionResult.success({"id": marker_id})

    def delete_marker(
        self, marker_id: str | None, page_id: str | None, ctx: RequestContext
    ) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("marker.delete", user.id, "modify", ctx)
        if limited:
            return limited

        if not is_valid_uuid(marker_id) or not is_valid_uuid(page_id):
            return self._guard.reject("marker.delete", "Invalid marker or page ID", ctx, field="id")
        marker_id = marker_id.lower()
        page_id = page_id.lower()

        try:
            if not self._owns_page(user, page_id):
                return ActionResult.failure("Page not found")
            deleted = self._backend.delete(MARKERS_TABLE, {"id": marker_id, "page_id": page_id})
        except BackendError as e:
            return ActionResult.failure(e.message)
        if not deleted:
            return ActionResult.failure("Marker not found")

        self._guard.audit.log_data_change(
            "delete",
            "marker",
            user_id=user.id,
            resource_id=marker_id,
            ip=ctx.ip,
            details={"pageId": page_id},
        )
        return ActionResult.success({"id": marker_id})

    def _owns_page(self, user: AuthUser, page_id: str) -> bool:
        return bool(self._backend.select(PAGES_TABLE, {"id": page_id, "user_id": user.id}))
