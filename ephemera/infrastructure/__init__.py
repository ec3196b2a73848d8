"""Infrastructure layer - adapters for logging, storage, config and HTTP."""

from .audit import LoggingAuditSink
from .backend import InMemoryBackend
from .config import YAMLConfigLoader
from .web import get_client_ip, security_headers

__all__ = [
    "LoggingAuditSink",
    "InMemoryBackend",
    "YAMLConfigLoader",
    "get_client_ip",
    "security_headers",
]
