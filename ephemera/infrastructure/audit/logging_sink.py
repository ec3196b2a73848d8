"""Audit sink writing events to a dedicated logger."""

import json
import logging
from typing import Literal

from ephemera.domain import AuditEvent

AuditFormat = Literal["json", "text"]


def format_json(event: AuditEvent) -> str:
    """One JSON object per event, for log aggregation."""
    data = {
        "level": "info" if event.success else "warn",
        "type": "audit",
        **event.to_dict(),
    }
    return json.dumps(data, default=str, ensure_ascii=False)


def format_text(event: AuditEvent) -> str:
    """Readable single line plus an optional details line."""
    icon = "✓" if event.success else "⚠"
    line = f"[AUDIT] {icon} {event.event} | user: {event.user_id or 'anonymous'} | ip: {event.ip}"
    if event.details:
        details = json.dumps(event.details, default=str, ensure_ascii=False)
        line = f"{line}\n  Details: {details}"
    return line


class LoggingAuditSink:
    """AuditSink backed by the standard logging module.

    Failed events log at WARNING, everything else at INFO.
    """

    def __init__(
        self,
        logger_name: str = "ephemera.audit",
        fmt: AuditFormat = "text",
    ) -> None:
        if fmt not in ("json", "text"):
            raise ValueError(f"Unknown audit format: {fmt}")
        self._logger = logging.getLogger(logger_name)
        self._format = format_json if fmt == "json" else format_text

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def emit(self, event: AuditEvent) -> None:
        level = logging.INFO if event.success else logging.WARNING
        self._logger.log(level, "%s", self._format(event))
