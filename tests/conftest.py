"""Shared test fixtures and configuration."""

from datetime import UTC, datetime

import pytest
from passlib.context import CryptContext

from ephemera.application.services import (
    ActionGuard,
    AuditLogger,
    AuthService,
    ImageUpload,
    MarkerService,
    PageService,
    RequestContext,
    TimelineService,
)
from ephemera.domain import AuditEvent, FixedWindowRateLimiter, RateLimitConfig
from ephemera.infrastructure.backend import InMemoryBackend

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

# ============= Mock Fixtures =============


class FakeClock:
    """Fake clock for testing rate limiter."""

    def __init__(self, start_time: float = 0.0):
        self._time = start_time

    def now(self) -> float:
        return self._time

    def advance(self, seconds: float) -> None:
        self._time += seconds


@pytest.fixture
def fake_clock():
    """Fake clock starting at 0."""
    return FakeClock()


class RecordingAuditSink:
    """Audit sink that keeps every event."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def emit(self, event: AuditEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [str(e.event) for e in self.events]

    def of_kind(self, kind: str) -> list[AuditEvent]:
        return [e for e in self.events if e.event == kind]


class FailingAuditSink:
    """Audit sink whose destination is unavailable."""

    def emit(self, event: AuditEvent) -> None:
        raise ConnectionError("log shipper unavailable")


@pytest.fixture
def audit_sink():
    """Recording audit sink."""
    return RecordingAuditSink()


@pytest.fixture
def failing_sink():
    """Audit sink that always raises."""
    return FailingAuditSink()


@pytest.fixture
def fixed_now():
    """Timestamp stamped on every audit event."""
    return FIXED_NOW


# ============= Domain Fixtures =============


@pytest.fixture
def strict_config():
    """Small limit for exhausting a window quickly."""
    return RateLimitConfig(limit=3, window_seconds=60)


@pytest.fixture
def limiter(fake_clock):
    """Rate limiter on a fake clock."""
    return FixedWindowRateLimiter(fake_clock)


# ============= Application Fixtures =============


@pytest.fixture
def audit_logger(audit_sink):
    """Audit logger with a fixed timestamp."""
    return AuditLogger(audit_sink, now=lambda: FIXED_NOW)


@pytest.fixture
def guard(limiter, audit_logger):
    """Action guard with rate limiting enabled."""
    return ActionGuard(limiter, audit_logger)


@pytest.fixture(scope="session")
def password_context():
    """Bcrypt context with the minimum work factor."""
    return CryptContext(schemes=["bcrypt"], bcrypt__rounds=4)


@pytest.fixture
def backend(password_context):
    """Empty in-memory backend."""
    return InMemoryBackend(password_context)


@pytest.fixture
def anonymous_ctx():
    """Request from a signed-out client."""
    return RequestContext(ip="203.0.113.7", user_agent="pytest")


@pytest.fixture
def user(backend):
    """Registered user."""
    return backend.sign_up("reader@example.com", "correct-horse", {"username": "reader"})


@pytest.fixture
def user_ctx(user):
    """Request from the signed-in user."""
    return RequestContext(ip="203.0.113.7", user_agent="pytest", user=user)


@pytest.fixture
def other_user_ctx(backend):
    """Request from a second, unrelated user."""
    other = backend.sign_up("other@example.com", "hunter22", {"username": "other"})
    return RequestContext(ip="198.51.100.9", user=other)


@pytest.fixture
def auth_service(backend, guard):
    return AuthService(backend, guard)


@pytest.fixture
def page_service(backend, guard):
    return PageService(backend, guard)


@pytest.fixture
def marker_service(backend, guard):
    return MarkerService(backend, guard)


@pytest.fixture
def timeline_service(backend, guard):
    return TimelineService(backend, guard)


@pytest.fixture
def png_image():
    """Small PNG upload."""
    return ImageUpload(filename="Scan 01.PNG", content_type="image/png", data=PNG_BYTES)


@pytest.fixture
def page_form():
    """Valid page form."""
    return {
        "title": "Ticket stub",
        "page_date": "2024-06-01",
        "caption": "Concert at the old hall",
        "visibility": "private",
    }


@pytest.fixture
def page_id(page_service, page_form, png_image, user_ctx):
    """Id of a page owned by the signed-in user."""
    result = page_service.create_page(page_form, png_image, user_ctx)
    assert result.ok, result.error
    return result.data["id"]
