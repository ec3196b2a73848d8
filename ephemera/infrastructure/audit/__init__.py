"""Audit sink implementations."""

from .logging_sink import LoggingAuditSink, format_json, format_text

__all__ = ["LoggingAuditSink", "format_json", "format_text"]
