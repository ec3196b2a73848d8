"""Web infrastructure - HTTP request and response helpers."""

from .client_ip import UNKNOWN_IP, get_client_ip
from .security_headers import security_headers

__all__ = [
    "UNKNOWN_IP",
    "get_client_ip",
    "security_headers",
]
