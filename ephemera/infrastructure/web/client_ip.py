"""Client IP extraction from proxy headers."""

from collections.abc import Mapping

UNKNOWN_IP = "unknown"


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Best-effort client IP for rate limiting and audit events.

    Tries X-Forwarded-For (first entry), CF-Connecting-IP, then X-Real-IP.
    Header lookup expects a case-insensitive mapping such as
    starlette's `Headers`; plain dicts must use lowercase keys.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for name in ("cf-connecting-ip", "x-real-ip"):
        value = headers.get(name)
        if value and value.strip():
            return value.strip()

    return UNKNOWN_IP
