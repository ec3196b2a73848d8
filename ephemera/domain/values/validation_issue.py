"""Validation issue value object."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single failed field rule.

    `path` holds the field-name segments leading to the offending value.
    """

    path: tuple[str, ...]
    message: str

    @property
    def field(self) -> str:
        """Dotted field path, as reported in audit events."""
        return ".".join(self.path)
