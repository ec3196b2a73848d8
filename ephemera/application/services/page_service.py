"""Page service - journal page create, update and delete."""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ephemera.domain import (
    PAGE_SCHEMA,
    PAGE_UPDATE_SCHEMA,
    BackendError,
    BackendPort,
    is_valid_uuid,
    sanitize_file_extension,
    sanitize_single_line,
    sanitize_text,
)

from .action_guard import ActionGuard, ActionResult, RequestContext, require_user
from .tables import PAGE_IMAGES_BUCKET, PAGES_TABLE

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


@dataclass(frozen=True, slots=True)
class ImageUpload:
    """Uploaded page image."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    """Accepted image types and size."""

    max_file_size: int = MAX_FILE_SIZE
    allowed_content_types: frozenset[str] = field(default=ALLOWED_CONTENT_TYPES)

    def __post_init__(self) -> None:
        if self.max_file_size <= 0:
            raise ValueError("Max file size must be positive")

    @property
    def max_size_label(self) -> str:
        return f"{self.max_file_size // (1024 * 1024)}MB"

    def check(self, image: ImageUpload | None) -> str | None:
        """Return the reason the image is rejected, None if accepted."""
        if image is None or image.size == 0:
            return "Please select an image to upload."
        if image.content_type not in self.allowed_content_types:
            return "Invalid image type. Allowed: JPEG, PNG, GIF, WebP"
        if image.size > self.max_file_size:
            return f"Image too large. Maximum size is {self.max_size_label}."
        return None


def page_image_path(user_id: str, page_id: str, extension: str) -> str:
    return f"{user_id}/{page_id}/original.{extension}"


class PageService:
    """Journal page actions."""

    def __init__(
        self,
        backend: BackendPort,
        guard: ActionGuard,
        upload_policy: UploadPolicy | None = None,
    ) -> None:
        self._backend = backend
        self._guard = guard
        self._upload_policy = upload_policy or UploadPolicy()

    def create_page(
        self,
        form: Mapping[str, Any],
        image: ImageUpload | None,
        ctx: RequestContext,
    ) -> ActionResult:
        """Upload the page image, then store the page row.

        The uploaded blob is removed again if the row cannot be stored.
        """
        if ctx.user is None:
            return ActionResult.failure("You must be signed in to create a page.")
        user = ctx.user

        limited = self._guard.check_rate_limit("page.create", user.id, "create", ctx)
        if limited:
            return limited

        rejection = self._upload_policy.check(image)
        if rejection:
            return self._guard.reject(
                "page.create",
                rejection,
                ctx,
                field="image",
                raw_input=image.content_type if image else None,
            )

        payload = self._sanitize(form)
        self._guard.flag_xss({"title": form.get("title"), "caption": form.get("caption")}, ctx)

        parsed = self._guard.validate("page.create", PAGE_SCHEMA, payload, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)
        value = parsed.value

        page_id = str(uuid.uuid4())
        object_path = page_image_path(user.id, page_id, sanitize_file_extension(image.filename))

        try:
            self._backend.upload(PAGE_IMAGES_BUCKET, object_path, image.data, image.content_type)
        except BackendError as e:
            logger.error("Page image upload failed path=%s: %s", object_path, e.message)
            return ActionResult.failure(e.message)

        row = {
            "id": page_id,
            "user_id": user.id,
            "title": value.get("title") or None,
            "page_date": value["page_date"],
            "caption": value.get("caption") or None,
            "visibility": value["visibility"],
            "image_path": object_path,
        }
        try:
            self._backend.insert(PAGES_TABLE, [row])
        except BackendError as e:
            self._remove_image(object_path)
            return ActionResult.failure(e.message)

        self._guard.audit.log_data_change(
            "create",
            "page",
            user_id=user.id,
            resource_id=page_id,
            ip=ctx.ip,
            details={"visibility": value["visibility"]},
        )
        return ActionResult.success({"id": page_id, "image_path": object_path})

    def update_page(self, form: Mapping[str, Any], ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("page.update", user.id, "modify", ctx)
        if limited:
            return limited

        page_id = form.get("id")
        if not is_valid_uuid(page_id):
            return self._guard.reject("page.update", "Invalid page ID", ctx, field="id")

        payload = {"id": page_id, **self._sanitize(form)}
        self._guard.flag_xss({"title": form.get("title"), "caption": form.get("caption")}, ctx)

        parsed = self._guard.validate("page.update", PAGE_UPDATE_SCHEMA, payload, ctx)
        if not parsed.ok:
            return ActionResult.failure(parsed.error)
        value = parsed.value

        values = {
            "title": value.get("title") or None,
            "page_date": value["page_date"],
            "caption": value.get("caption") or None,
            "visibility": value["visibility"],
        }
        try:
            updated = self._backend.update(
                PAGES_TABLE, values, {"id": value["id"], "user_id": user.id}
            )
        except BackendError as e:
            return ActionResult.failure(e.message)
        if not updated:
            return ActionResult.failure("Page not found")

        self._guard.audit.log_data_change(
            "update",
            "page",
            user_id=user.id,
            resource_id=value["id"],
            ip=ctx.ip,
            details={"visibility": value["visibility"]},
        )
        return ActionResult.success({"id": value["id"]})

    def delete_page(self, page_id: str | None, ctx: RequestContext) -> ActionResult:
        user = require_user(ctx)

        limited = self._guard.check_rate_limit("page.delete", user.id, "modify", ctx)
        if limited:
            return limited

        if not is_valid_uuid(page_id):
            return self._guard.reject("page.delete", "Invalid page ID", ctx, field="id")
        page_id = page_id.lower()

        filters = {"id": page_id, "user_id": user.id}
        try:
            rows = self._backend.select(PAGES_TABLE, filters)
            if not rows:
                return ActionResult.failure("Page not found")
            self._backend.delete(PAGES_TABLE, filters)
        except BackendError as e:
            return ActionResult.failure(e.message)

        image_path = rows[0].get("image_path")
        if image_path:
            self._remove_image(image_path)

        self._guard.audit.log_data_change(
            "delete", "page", user_id=user.id, resource_id=page_id, ip=ctx.ip
        )
        return ActionResult.success({"id": page_id})

    def _sanitize(self, form: Mapping[str, Any]) -> dict[str, Any]:
        title = form.get("title")
        caption = form.get("caption")
        return {
            "title": sanitize_single_line(title) if title else None,
            "page_date": form.get("page_date"),
            "caption": sanitize_text(caption) if caption else None,
            "visibility": form.get("visibility"),
        }

    def _remove_image(self, object_path: str) -> None:
        try:
            self._backend.remove(PAGE_IMAGES_BUCKET, [object_path])
        except BackendError as e:
            logger.warning("Failed to remove page image path=%s: %s", object_path, e.message)
