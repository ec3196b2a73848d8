"""Tests for PageService."""

import pytest

from ephemera.application.services import ImageUpload, PageService, UploadPolicy
from ephemera.domain import BackendError, NotAuthenticatedError
from ephemera.infrastructure.backend import InMemoryBackend

BUCKET = "journal-pages"


class RejectingInsertBackend(InMemoryBackend):
    """Backend whose table writes fail after the upload succeeded."""

    def insert(self, table, rows):
        raise BackendError("insert failed")


class TestUploadPolicy:
    """Tests for UploadPolicy."""

    def test_accepts_png(self, png_image):
        """Test an allowed image passes."""
        assert UploadPolicy().check(png_image) is None

    @pytest.mark.parametrize(
        "image, message",
        [
            (None, "Please select an image to upload."),
            (ImageUpload("a.png", "image/png", b""), "Please select an image to upload."),
            (ImageUpload("a.svg", "image/svg+xml", b"<svg/>"), "Invalid image type. Allowed: JPEG, PNG, GIF, WebP"),
        ],
    )
    def test_rejections(self, image, message):
        """Test missing, empty and disallowed images."""
        assert UploadPolicy().check(image) == message

    def test_too_large(self):
        """Test the size cap names the limit in megabytes."""
        policy = UploadPolicy(max_file_size=2 * 1024 * 1024)
        image = ImageUpload("a.jpg", "image/jpeg", b"\x00" * (2 * 1024 * 1024 + 1))

        assert policy.check(image) == "Image too large. Maximum size is 2MB."

    def test_rejects_non_positive_size(self):
        """Test the size cap must be positive."""
        with pytest.raises(ValueError, match="Max file size must be positive"):
            UploadPolicy(max_file_size=0)


class TestCreatePage:
    """Tests for PageService.create_page."""

    def test_creates_row_and_blob(self, page_service, backend, page_form, png_image, user_ctx, audit_sink):
        """Test the image lands under user/page/original.ext and the row references it."""
        result = page_service.create_page(page_form, png_image, user_ctx)

        assert result.ok
        page_id = result.data["id"]
        path = f"{user_ctx.user.id}/{page_id}/original.png"
        assert result.data["image_path"] == path
        assert backend.get_object(BUCKET, path).content_type == "image/png"

        (row,) = backend.select("journal_pages", {"id": page_id})
        assert row["user_id"] == user_ctx.user.id
        assert row["title"] == "Ticket stub"
        assert row["visibility"] == "private"
        assert audit_sink.kinds() == ["page.create"]
        assert audit_sink.events[0].details == {"resourceId": page_id, "visibility": "private"}

    def test_sanitizes_text(self, page_service, backend, png_image, user_ctx, audit_sink):
        """Test markup is stripped from stored text and the attempt is audited."""
        form = {
            "title": "<b>Bold</b>\ntitle",
            "page_date": "2024-06-01",
            "caption": "line one\n\n<i>line</i>   two",
            "visibility": "public",
        }

        result = page_service.create_page(form, png_image, user_ctx)

        (row,) = backend.select("journal_pages", {"id": result.data["id"]})
        assert row["title"] == "Bold title"
        assert row["caption"] == "line one\n\nline two"
        assert audit_sink.kinds()[:2] == ["security.xss_attempt", "security.xss_attempt"]

    def test_blank_optionals_stored_as_null(self, page_service, backend, png_image, user_ctx):
        """Test empty title and caption become NULL."""
        form = {"title": "", "page_date": "2024-06-01", "caption": "  ", "visibility": "unlisted"}

        result = page_service.create_page(form, png_image, user_ctx)

        (row,) = backend.select("journal_pages", {"id": result.data["id"]})
        assert row["title"] is None
        assert row["caption"] is None

    def test_anonymous_gets_message(self, page_service, page_form, png_image, anonymous_ctx):
        """Test signed-out callers get a message rather than an exception."""
        result = page_service.create_page(page_form, png_image, anonymous_ctx)

        assert result.error == "You must be signed in to create a page."

    def test_invalid_image_is_audited(self, page_service, page_form, user_ctx, audit_sink):
        """Test upload rejections are recorded as validation failures."""
        image = ImageUpload("a.svg", "image/svg+xml", b"<svg/>")

        result = page_service.create_page(page_form, image, user_ctx)

        assert result.error == "Invalid image type. Allowed: JPEG, PNG, GIF, WebP"
        (event,) = audit_sink.events
        assert event.details["field"] == "image"

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"page_date": "2024-13-01"}, "Invalid date format (YYYY-MM-DD)"),
            ({"page_date": "2024-02-30"}, "Invalid date format (YYYY-MM-DD)"),
            ({"page_date": "1800-01-01"}, "Date out of valid range"),
            ({"visibility": "friends"}, "Visibility must be private, public or unlisted"),
            ({"title": "x" * 121}, "Max 120 characters"),
        ],
    )
    def test_validation(self, page_service, backend, page_form, png_image, user_ctx, changes, message):
        """Test invalid forms are rejected and nothing is uploaded."""
        result = page_service.create_page({**page_form, **changes}, png_image, user_ctx)

        assert result.error == message
        assert backend.select("journal_pages", {}) == []

    def test_unknown_extension_defaults_to_jpg(self, page_service, page_form, user_ctx):
        """Test odd file names fall back to the default extension."""
        image = ImageUpload("scan.exe", "image/jpeg", b"\xff\xd8\xff")

        result = page_service.create_page(page_form, image, user_ctx)

        assert result.data["image_path"].endswith("/original.jpg")

    def test_blob_removed_when_insert_fails(self, guard, page_form, png_image, user_ctx):
        """Test a failed row insert does not leave an orphaned image."""
        backend = RejectingInsertBackend()
        service = PageService(backend, guard)

        result = service.create_page(page_form, png_image, user_ctx)

        assert result.error == "insert failed"
        assert backend._buckets.get(BUCKET, {}) == {}

    def test_create_rate_limit(self, page_service, page_form, png_image, user_ctx):
        """Test page creation is limited to ten per minute per user."""
        for _ in range(10):
            assert page_service.create_page(page_form, png_image, user_ctx).ok

        result = page_service.create_page(page_form, png_image, user_ctx)

        assert result.rate_limited is True


class TestUpdatePage:
    """Tests for PageService.update_page."""

    def test_updates_own_page(self, page_service, backend, page_id, page_form, user_ctx):
        """Test the owner can change the page."""
        result = page_service.update_page(
            {**page_form, "id": page_id.upper(), "title": "Renamed", "visibility": "public"},
            user_ctx,
        )

        assert result.ok
        (row,) = backend.select("journal_pages", {"id": page_id})
        assert row["title"] == "Renamed"
        assert row["visibility"] == "public"

    def test_other_user_cannot_update(self, page_service, page_id, page_form, other_user_ctx):
        """Test pages of another user look missing."""
        result = page_service.update_page({**page_form, "id": page_id}, other_user_ctx)

        assert result.error == "Page not found"

    def test_invalid_id(self, page_service, page_form, user_ctx, audit_sink):
        """Test a malformed id is rejected and audited."""
        result = page_service.update_page({**page_form, "id": "not-a-uuid"}, user_ctx)

        assert result.error == "Invalid page ID"
        assert audit_sink.kinds() == ["validation.failure"]

    def test_requires_user(self, page_service, page_form, anonymous_ctx):
        """Test anonymous updates raise."""
        with pytest.raises(NotAuthenticatedError):
            page_service.update_page(page_form, anonymous_ctx)


class TestDeletePage:
    """Tests for PageService.delete_page."""

    def test_deletes_row_and_image(self, page_service, backend, page_id, user_ctx, audit_sink):
        """Test the row and its stored image are both removed."""
        (row,) = backend.select("journal_pages", {"id": page_id})

        result = page_service.delete_page(page_id, user_ctx)

        assert result.ok
        assert backend.select("journal_pages", {"id": page_id}) == []
        assert backend.get_object(BUCKET, row["image_path"]) is None
        assert audit_sink.kinds()[-1] == "page.delete"

    def test_other_user_cannot_delete(self, page_service, backend, page_id, other_user_ctx):
        """Test another user's delete leaves the page in place."""
        result = page_service.delete_page(page_id, other_user_ctx)

        assert result.error == "Page not found"
        assert backend.select("journal_pages", {"id": page_id}) != []

    @pytest.mark.parametrize("page_id", [None, "", "1234"])
    def test_invalid_id(self, page_service, user_ctx, page_id):
        """Test malformed ids are rejected."""
        assert page_service.delete_page(page_id, user_ctx).error == "Invalid page ID"
