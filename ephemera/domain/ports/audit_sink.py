"""Audit sink port - destination for audit events."""

from typing import Protocol

from ..values import AuditEvent


class AuditSink(Protocol):
    """Protocol for audit event destinations.

    Infrastructure layer implements this (log stream, SIEM, table).
    """

    def emit(self, event: AuditEvent) -> None:
        """Record a single event."""
        ...
