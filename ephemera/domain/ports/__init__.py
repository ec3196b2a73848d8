"""Domain ports - interfaces for infrastructure to implement."""

from .audit_sink import AuditSink
from .backend_port import BackendPort

__all__ = [
    "AuditSink",
    "BackendPort",
]
