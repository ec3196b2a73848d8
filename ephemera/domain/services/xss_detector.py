"""Heuristic detection of script injection attempts.

Detection only decides whether an attempt is worth an audit event; it never
blocks a request. It is a blocklist, so it will miss obfuscated payloads
that a parser-based HTML sanitizer would catch.
"""

import re

XSS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<[^>]*>"),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
    re.compile(r"on[A-Za-z0-9_]+\s*=", re.IGNORECASE),
)

# Narrower family used by the validator to reject already-sanitized values
DANGEROUS_CONTENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on[A-Za-z0-9_]+\s*=", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
)


def contains_xss_patterns(value: str | None) -> bool:
    """Check if raw input looks like an XSS attempt."""
    if not value:
        return False
    return any(pattern.search(value) for pattern in XSS_PATTERNS)


def contains_dangerous_content(value: str) -> bool:
    """Check for script tags, script protocols and event handler attributes."""
    return any(pattern.search(value) for pattern in DANGEROUS_CONTENT_PATTERNS)
