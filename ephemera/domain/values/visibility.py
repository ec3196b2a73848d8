"""Visibility value object."""

from enum import StrEnum


class Visibility(StrEnum):
    """Who can see a page or timeline."""

    PRIVATE = "private"
    PUBLIC = "public"
    UNLISTED = "unlisted"
