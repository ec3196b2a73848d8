"""Dependency container - holds all wired dependencies."""

from dataclasses import dataclass

from ephemera.application.services import (
    ActionGuard,
    AuditLogger,
    AuthService,
    MarkerService,
    PageService,
    RateLimitSweeper,
    TimelineService,
)
from ephemera.config import Config
from ephemera.domain import BackendPort, FixedWindowRateLimiter


@dataclass(frozen=True)
class Container:
    """Immutable dependency container.

    All dependencies are wired at startup and cannot be modified.
    The limiter is the only shared mutable state and is owned here.
    """

    # Services
    auth_service: AuthService
    page_service: PageService
    marker_service: MarkerService
    timeline_service: TimelineService

    # Shared components
    guard: ActionGuard
    audit: AuditLogger
    rate_limiter: FixedWindowRateLimiter
    sweeper: RateLimitSweeper
    backend: BackendPort

    # Configuration
    config: Config

    @property
    def server_host(self) -> str:
        return self.config.server.host

    @property
    def server_port(self) -> int:
        return self.config.server.port

    async def start(self) -> None:
        """Start background tasks."""
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()
