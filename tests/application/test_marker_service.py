"""Tests for MarkerService."""

import uuid

import pytest

from ephemera.domain import NotAuthenticatedError


@pytest.fixture
def marker_payload(page_id):
    return {
        "page_id": page_id,
        "x": "0.25",
        "y": 0.5,
        "label": "Stamp",
        "note": "Faded\nred ink",
        "category": "postage",
        "source_date": "1987-04-02",
        "source_location": "Lisbon",
    }


@pytest.fixture
def marker_id(marker_service, marker_payload, user_ctx):
    result = marker_service.create_marker(marker_payload, user_ctx)
    assert result.ok, result.error
    return result.data["id"]


def _marker(backend, marker_id):
    (row,) = backend.select("page_items", {"id": marker_id})
    return row


class TestCreateMarker:
    """Tests for MarkerService.create_marker."""

    def test_creates_marker(self, marker_service, backend, marker_payload, user_ctx, audit_sink):
        """Test a valid marker is stored with normalized coordinates."""
        result = marker_service.create_marker(marker_payload, user_ctx)

        assert result.ok
        row = _marker(backend, result.data["id"])
        assert row["x"] == 0.25
        assert row["y"] == 0.5
        assert row["label"] == "Stamp"
        assert row["note"] == "Faded\nred ink"
        assert audit_sink.of_kind("marker.create")[0].details == {
            "resourceId": result.data["id"],
            "pageId": marker_payload["page_id"],
        }

    def test_coordinates_are_clamped_and_rounded(self, marker_service, backend, page_id, user_ctx):
        """Test out-of-range coordinates clamp to the image edges."""
        result = marker_service.create_marker(
            {"page_id": page_id, "x": "1.7", "y": "0.1234567", "label": "Edge"}, user_ctx
        )

        row = _marker(backend, result.data["id"])
        assert row["x"] == 1.0
        assert row["y"] == 0.123457

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"x": None}, "X must be a finite number"),
            ({"y": "abc"}, "Y must be a finite number"),
            ({"x": "Infinity"}, "X must be a finite number"),
            ({"label": "<b></b>"}, "Label is required"),
            ({"label": None}, "Label is required"),
            ({"source_date": "April 1987"}, "Invalid date format"),
            ({"page_id": "nope"}, "Invalid page ID"),
            ({"category": "c" * 81}, "Max 80 characters"),
        ],
    )
    def test_validation(self, marker_service, marker_payload, user_ctx, changes, message):
        """Test invalid markers are rejected with the first issue."""
        result = marker_service.create_marker({**marker_payload, **changes}, user_ctx)

        assert result.error == message

    def test_missing_coordinates(self, marker_service, page_id, user_ctx):
        """Test coordinates are required on create."""
        result = marker_service.create_marker({"page_id": page_id, "label": "x"}, user_ctx)

        assert result.error == "X must be a finite number"

    def test_empty_source_date_is_absent(self, marker_service, backend, marker_payload, user_ctx):
        """Test an empty date input is treated as not provided."""
        result = marker_service.create_marker({**marker_payload, "source_date": ""}, user_ctx)

        assert result.ok
        assert "source_date" not in _marker(backend, result.data["id"])

    def test_page_of_other_user(self, marker_service, marker_payload, other_user_ctx):
        """Test markers cannot be added to someone else's page."""
        result = marker_service.create_marker(marker_payload, other_user_ctx)

        assert result.error == "Page not found"

    def test_requires_user(self, marker_service, marker_payload, anonymous_ctx):
        """Test anonymous calls raise."""
        with pytest.raises(NotAuthenticatedError):
            marker_service.create_marker(marker_payload, anonymous_ctx)


class TestUpdateMarker:
    """Tests for MarkerService.update_marker."""

    def test_partial_update(self, marker_service, backend, marker_id, page_id, user_ctx, audit_sink):
        """Test only the fields sent are changed."""
        result = marker_service.update_marker(
            {"id": marker_id, "page_id": page_id, "label": "Postmark", "x": 0.9}, user_ctx
        )

        assert result.ok
        row = _marker(backend, marker_id)
        assert row["label"] == "Postmark"
        assert row["x"] == 0.9
        assert row["y"] == 0.5
        assert row["note"] == "Faded\nred ink"
        assert audit_sink.of_kind("marker.update")[0].details["fields"] == ["label", "x"]

    def test_empty_values_clear_optional_fields(self, marker_service, backend, marker_id, page_id, user_ctx):
        """Test sending empty optional fields clears them."""
        result = marker_service.update_marker(
            {"id": marker_id, "page_id": page_id, "note": "", "source_date": ""}, user_ctx
        )

        assert result.ok
        row = _marker(backend, marker_id)
        assert row["note"] is None
        assert row["source_date"] is None
        assert row["category"] == "postage"

    def test_no_fields_is_a_no_op(self, marker_service, marker_id, page_id, user_ctx, audit_sink):
        """Test an update without fields succeeds without touching the backend."""
        audit_sink.events.clear()

        result = marker_service.update_marker({"id": marker_id, "page_id": page_id}, user_ctx)

        assert result.ok
        assert audit_sink.events == []

    def test_unparsable_coordinate(self, marker_service, marker_id, page_id, user_ctx):
        """Test a coordinate that is present but unparsable is rejected."""
        result = marker_service.update_marker(
            {"id": marker_id, "page_id": page_id, "y": "north"}, user_ctx
        )

        assert result.error == "Y must be a finite number"

    def test_empty_label_rejected(self, marker_service, marker_id, page_id, user_ctx):
        """Test the label cannot be cleared."""
        result = marker_service.update_marker(
            {"id": marker_id, "page_id": page_id, "label": "   "}, user_ctx
        )

        assert result.error == "Label is required"

    def test_invalid_ids(self, marker_service, page_id, user_ctx):
        """Test malformed marker or page ids."""
        result = marker_service.update_marker({"id": "x", "page_id": page_id}, user_ctx)

        assert result.error == "Invalid marker or page ID"

    def test_unknown_marker(self, marker_service, marker_id, page_id, user_ctx):
        """Test a well-formed id that matches nothing."""
        result = marker_service.update_marker(
            {"id": str(uuid.uuid4()), "page_id": page_id, "label": "x"}, user_ctx
        )

        assert result.error == "Marker not found"

    def test_other_user(self, marker_service, marker_id, page_id, other_user_ctx):
        """Test another user cannot edit markers on the page."""
        result = marker_service.update_marker(
            {"id": marker_id, "page_id": page_id, "label": "mine"}, other_user_ctx
        )

        assert result.error == "Page not found"


class TestDeleteMarker:
    """Tests for MarkerService.delete_marker."""

    def test_deletes(self, marker_service, backend, marker_id, page_id, user_ctx, audit_sink):
        """Test the owner can delete a marker."""
        result = marker_service.delete_marker(marker_id, page_id, user_ctx)

        assert result.ok
        assert backend.select("page_items", {"id": marker_id}) == []
        assert audit_sink.kinds()[-1] == "marker.delete"

    def test_delete_twice(self, marker_service, marker_id, page_id, user_ctx):
        """Test the second delete reports the marker missing."""
        marker_service.delete_marker(marker_id, page_id, user_ctx)

        assert marker_service.delete_marker(marker_id, page_id, user_ctx).error == "Marker not found"

    def test_other_user(self, marker_service, backend, marker_id, page_id, other_user_ctx):
        """Test another user's delete is refused."""
        result = marker_service.delete_marker(marker_id, page_id, other_user_ctx)

        assert result.error == "Page not found"
        assert backend.select("page_items", {"id": marker_id}) != []

    def test_invalid_ids(self, marker_service, user_ctx):
        """Test malformed ids are rejected."""
        assert marker_service.delete_marker(None, "x", user_ctx).error == "Invalid marker or page ID"
