"""Input sanitizers applied to untrusted form values before validation.

Sanitizers never raise. Absent input becomes an empty string, or None for
the coordinate and UUID sanitizers whose callers must reject it.
"""

import math
import re
from collections.abc import Callable

# HTML tag-like substrings
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")

# ASCII control characters except tab, newline and carriage return
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

WHITESPACE_PATTERN = re.compile(r"\s+")

# Script injection fragments (the event handler pattern also eats its value)
SCRIPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
    re.compile(r"on[A-Za-z0-9_]+\s*=[^>]*", re.IGNORECASE),
)

NON_USERNAME_CHAR_PATTERN = re.compile(r"[^a-z0-9_]")
NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-z0-9]")

UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")

# Leading numeric prefix, the way browsers parse floats out of form fields
FLOAT_PREFIX_PATTERN = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)

COORDINATE_PRECISION = 1_000_000

ALLOWED_IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
DEFAULT_IMAGE_EXTENSION = "jpg"


def _until_stable(step: Callable[[str], str], value: str) -> str:
    """Apply `step` until the value stops changing.

    Stripping one fragment can splice two halves into a new one
    ("javajavascript:script:"), so a single pass is not idempotent.
    """
    while True:
        cleaned = step(value)
        if cleaned == value:
            return cleaned
        value = cleaned


def _text_pass(value: str) -> str:
    value = HTML_TAG_PATTERN.sub("", value)
    value = CONTROL_CHAR_PATTERN.sub("", value)
    for pattern in SCRIPT_PATTERNS:
        value = pattern.sub("", value)

    lines = (WHITESPACE_PATTERN.sub(" ", line).strip() for line in value.split("\n"))
    return "\n".join(lines).strip()


def _single_line_pass(value: str) -> str:
    value = _until_stable(_text_pass, value)
    return WHITESPACE_PATTERN.sub(" ", value.replace("\n", " ")).strip()


def sanitize_text(value: str | None) -> str:
    """Clean multi-line free text.

    Strips tags, control characters and script fragments, collapses
    whitespace within each line and keeps the line breaks.
    """
    if not value:
        return ""
    return _until_stable(_text_pass, str(value))


def sanitize_single_line(value: str | None) -> str:
    """Clean text that must fit on one line."""
    if not value:
        return ""
    return _until_stable(_single_line_pass, str(value))


def sanitize_email(value: str | None) -> str:
    """Lowercase an email and drop all whitespace and tags.

    Format is checked by the schema validator, not here.
    """
    if not value:
        return ""

    sanitized = str(value).lower()
    sanitized = WHITESPACE_PATTERN.sub("", sanitized)
    return HTML_TAG_PATTERN.sub("", sanitized)


def sanitize_username(value: str | None) -> str:
    """Lowercase a username and keep only [a-z0-9_]."""
    if not value:
        return ""

    sanitized = str(value).lower().strip()
    return NON_USERNAME_CHAR_PATTERN.sub("", sanitized)


def _parse_float(value: str) -> float:
    match = FLOAT_PREFIX_PATTERN.match(value.strip())
    if match is None:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def sanitize_coordinate(value: float | int | str | None) -> float | None:
    """Normalize a marker coordinate into [0, 1] with 6 decimal places.

    Returns None when the input is absent, unparsable or not finite.
    """
    if value is None:
        return None

    if isinstance(value, str):
        number = _parse_float(value)
    else:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None

    if not math.isfinite(number):
        return None

    clamped = max(0.0, min(1.0, number))
    # Round half up, then divide back to a float with 6 decimals
    return math.floor(clamped * COORDINATE_PRECISION + 0.5) / COORDINATE_PRECISION


def sanitize_uuid(value: str | None) -> str | None:
    """Return the lowercased UUID, or None if it is not 8-4-4-4-12 hex."""
    if not value:
        return None

    sanitized = str(value).lower().strip()
    if UUID_PATTERN.fullmatch(sanitized) is None:
        return None
    return sanitized


def sanitize_file_extension(filename: str | None) -> str:
    """Derive a safe storage extension from an uploaded file name."""
    if not filename:
        return DEFAULT_IMAGE_EXTENSION

    extension = NON_ALPHANUMERIC_PATTERN.sub("", filename.rsplit(".", 1)[-1].lower())
    if extension in ALLOWED_IMAGE_EXTENSIONS:
        return extension
    return DEFAULT_IMAGE_EXTENSION
