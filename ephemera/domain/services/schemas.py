"""Schemas for auth, page, marker and timeline payloads."""

import re
from datetime import date

from ..values import Visibility
from .schema_validator import NUMBER, FieldRule, Refinement, Schema
from .xss_detector import contains_dangerous_content

# Names that collide with routes or system terms
RESERVED_USERNAMES: frozenset[str] = frozenset(
    {
        "admin",
        "administrator",
        "api",
        "auth",
        "login",
        "logout",
        "signin",
        "signout",
        "signup",
        "register",
        "new",
        "timeline",
        "timelines",
        "settings",
        "profile",
        "user",
        "users",
        "account",
        "help",
        "support",
        "contact",
        "about",
        "terms",
        "privacy",
        "public",
        "private",
        "system",
        "root",
        "null",
        "undefined",
        "test",
        "demo",
        "example",
        "www",
        "mail",
        "email",
        "ftp",
        "localhost",
    }
)

# Single @, dotted domain, no empty or hyphen-edged labels
EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+"
)

# Starts with a letter, no consecutive or trailing underscores
USERNAME_PATTERN = re.compile(r"[a-z][a-z0-9]*(?:_[a-z0-9]+)*")

# ASCII digits only; \d would also accept other scripts' digits
DATE_PATTERN = re.compile(r"[0-9]{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12][0-9]|3[01])")

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)

HEX_COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")

PAGE_DATE_YEARS_BACK = 100
DEFAULT_TIMELINE_COLOR = "#8b4513"
DEFAULT_TIMELINE_ICON = "\U0001f4c1"

SAFE_CONTENT = Refinement(
    lambda value: not contains_dangerous_content(value), "Invalid content detected"
)


def is_valid_uuid(value: object) -> bool:
    """Check the 8-4-4-4-12 hex shape, ignoring case."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None


def _is_calendar_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _within_page_date_range(value: str) -> bool:
    """From Jan 1st a century ago to the end of next year."""
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        # Reported by the calendar check
        return True
    today = date.today()
    earliest = date(today.year - PAGE_DATE_YEARS_BACK, 1, 1)
    latest = date(today.year + 1, 12, 31)
    return earliest <= parsed <= latest


def _is_not_reserved(value: str) -> bool:
    return value.lower() not in RESERVED_USERNAMES


def safe_text(name: str, max_length: int, *, required: bool = False, **kwargs) -> FieldRule:
    """Length-capped text field that rejects dangerous content."""
    refinements = (SAFE_CONTENT, *kwargs.pop("refinements", ()))
    return FieldRule(
        name,
        required=required,
        max_length=max_length,
        refinements=refinements,
        **kwargs,
    )


def coordinate(name: str) -> FieldRule:
    axis = name.upper()
    return FieldRule(
        name,
        kind=NUMBER,
        required_message=f"{axis} must be a finite number",
        finite_message=f"{axis} must be a finite number",
        minimum=0,
        minimum_message=f"{axis} must be >= 0",
        maximum=1,
        maximum_message=f"{axis} must be <= 1",
    )


def uuid_field(name: str, message: str) -> FieldRule:
    return FieldRule(
        name,
        required_message=message,
        pattern=UUID_PATTERN,
        pattern_message=message,
        transform=str.lower,
    )


VISIBILITY_CHOICES = tuple(v.value for v in Visibility)
VISIBILITY_MESSAGE = "Visibility must be private, public or unlisted"


AUTH_SCHEMA = Schema(
    "auth",
    (
        FieldRule(
            "email",
            required_message="Email is required",
            min_length=1,
            min_length_message="Email is required",
            max_length=254,
            max_length_message="Email too long",
            pattern=EMAIL_PATTERN,
            pattern_message="Valid email required",
            transform=lambda value: value.lower().strip(),
        ),
        FieldRule(
            "password",
            required_message="Password is required",
            min_length=6,
            min_length_message="At least 6 characters",
            max_length=128,
            max_length_message="Password too long",
        ),
        FieldRule(
            "username",
            min_length=3,
            min_length_message="Min 3 characters",
            max_length=30,
            max_length_message="Max 30 characters",
            pattern=USERNAME_PATTERN,
            pattern_message="Must start with letter, only lowercase letters, numbers, underscores",
            refinements=(Refinement(_is_not_reserved, "This username is not available"),),
            transform=str.lower,
        ),
        safe_text("display_name", 80, nullable=True),
    ),
)

SIGN_IN_SCHEMA = AUTH_SCHEMA.pick("email", "password")

SIGN_UP_SCHEMA = AUTH_SCHEMA

PAGE_SCHEMA = Schema(
    "page",
    (
        safe_text("title", 120),
        FieldRule(
            "page_date",
            required_message="Invalid date format (YYYY-MM-DD)",
            pattern=DATE_PATTERN,
            pattern_message="Invalid date format (YYYY-MM-DD)",
            refinements=(
                Refinement(_is_calendar_date, "Invalid date format (YYYY-MM-DD)"),
                Refinement(_within_page_date_range, "Date out of valid range"),
            ),
        ),
        safe_text("caption", 500),
        FieldRule(
            "visibility",
            required_message=VISIBILITY_MESSAGE,
            choices=VISIBILITY_CHOICES,
            choices_message=VISIBILITY_MESSAGE,
        ),
    ),
)

PAGE_UPDATE_SCHEMA = PAGE_SCHEMA.extend(uuid_field("id", "Invalid page ID"), name="page_update")

MARKER_SCHEMA = Schema(
    "marker",
    (
        uuid_field("page_id", "Invalid page ID"),
        coordinate("x"),
        coordinate("y"),
        safe_text(
            "label",
            120,
            required=True,
            required_message="Label is required",
            refinements=(Refinement(lambda value: len(value.strip()) >= 1, "Label is required"),),
        ),
        safe_text("note", 500),
        safe_text("category", 80),
        FieldRule(
            "source_date",
            required=False,
            empty_as_missing=True,
            pattern=DATE_PATTERN,
            pattern_message="Invalid date format",
        ),
        safe_text("source_location", 120),
    ),
)

# PATCH semantics: marker id and page id are required, everything else optional
MARKER_UPDATE_SCHEMA = (
    MARKER_SCHEMA.partial(name="marker_update")
    .omit("page_id")
    .extend(uuid_field("id", "Invalid marker ID"), uuid_field("page_id", "Invalid page ID"))
)

TIMELINE_SCHEMA = Schema(
    "timeline",
    (
        FieldRule(
            "name",
            required_message="Name is required",
            min_length=1,
            min_length_message="Name is required",
            max_length=100,
            max_length_message="Name must be 100 characters or less",
        ),
        FieldRule(
            "description",
            required=False,
            nullable=True,
            max_length=500,
            max_length_message="Description must be 500 characters or less",
        ),
        FieldRule(
            "color",
            required=False,
            empty_as_missing=True,
            default=DEFAULT_TIMELINE_COLOR,
            pattern=HEX_COLOR_PATTERN,
            pattern_message="Color must be a valid hex color",
        ),
        FieldRule(
            "icon",
            required=False,
            empty_as_missing=True,
            default=DEFAULT_TIMELINE_ICON,
            max_length=10,
            max_length_message="Icon must be 10 characters or less",
        ),
        FieldRule(
            "visibility",
            required=False,
            empty_as_missing=True,
            default=Visibility.PRIVATE.value,
            choices=VISIBILITY_CHOICES,
            choices_message=VISIBILITY_MESSAGE,
        ),
    ),
)

TIMELINE_UPDATE_SCHEMA = TIMELINE_SCHEMA.extend(
    uuid_field("id", "Invalid timeline ID"), name="timeline_update"
)
