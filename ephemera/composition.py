"""Composition root - the ONLY place where dependencies are wired."""

from pathlib import Path

from ephemera.application.services import (
    ActionGuard,
    AuditLogger,
    AuthService,
    MarkerService,
    PageService,
    RateLimitSweeper,
    TimelineService,
    UploadPolicy,
)
from ephemera.config import Config, load_config
from ephemera.container import Container
from ephemera.domain import AuditSink, BackendPort, Clock, FixedWindowRateLimiter
from ephemera.infrastructure.audit import LoggingAuditSink
from ephemera.infrastructure.backend import InMemoryBackend


def create_container(
    config_path: Path | str = "config.yaml",
    *,
    config: Config | None = None,
    backend: BackendPort | None = None,
    audit_sink: AuditSink | None = None,
    clock: Clock | None = None,
) -> Container:
    """Create the dependency container with all wired dependencies.

    This is the composition root - the single place where all
    dependencies are created and wired together.

    Args:
        config_path: Path to config file, ignored when `config` is given.
        config: Already loaded configuration.
        backend: Backend collaborator, defaults to an in-memory backend.
        audit_sink: Audit destination, defaults to the configured logger sink.
        clock: Clock for the rate limiter, defaults to a monotonic clock.

    Returns:
        Fully wired dependency container.
    """
    config = config or load_config(config_path)

    backend = backend or InMemoryBackend()
    audit_sink = audit_sink or LoggingAuditSink(
        logger_name=config.audit.logger_name,
        fmt=config.audit.format,
    )

    # One limiter per process, shared by every action
    rate_limiter = FixedWindowRateLimiter(clock)
    audit = AuditLogger(audit_sink)
    guard = ActionGuard(rate_limiter, audit, enabled=config.rate_limit.enabled)

    upload_policy = UploadPolicy(
        max_file_size=config.uploads.max_file_size,
        allowed_content_types=frozenset(config.uploads.allowed_content_types),
    )

    return Container(
        auth_service=AuthService(backend, guard),
        page_service=PageService(backend, guard, upload_policy),
        marker_service=MarkerService(backend, guard),
        timeline_service=TimelineService(backend, guard),
        guard=guard,
        audit=audit,
        rate_limiter=rate_limiter,
        sweeper=RateLimitSweeper(rate_limiter, config.rate_limit.sweep_interval_seconds),
        backend=backend,
        config=config,
    )
