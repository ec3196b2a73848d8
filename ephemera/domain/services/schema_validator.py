"""Declarative schema validation.

A schema is plain data: an ordered tuple of `FieldRule`s. `validate` walks
the rules in declaration order and, per field, evaluates the type check,
length or range bounds, pattern, allowed choices and refinements. Every
failing check becomes a `ValidationIssue`; the first one is what end users
see, the full list is kept for programmatic callers.
"""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..values import ValidationIssue

STRING = "string"
NUMBER = "number"

_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class Refinement:
    """Custom predicate over an already type-checked value."""

    predicate: Callable[[Any], bool]
    message: str


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Constraints for one field of a schema."""

    name: str
    kind: str = STRING
    required: bool = True
    nullable: bool = False
    # Treat "" like an absent value (optional date inputs)
    empty_as_missing: bool = False
    default: Any = _MISSING
    required_message: str = "Required"
    min_length: int | None = None
    min_length_message: str | None = None
    max_length: int | None = None
    max_length_message: str | None = None
    pattern: re.Pattern[str] | None = None
    pattern_message: str = "Invalid format"
    minimum: float | None = None
    minimum_message: str | None = None
    maximum: float | None = None
    maximum_message: str | None = None
    finite_message: str = "Expected a finite number"
    choices: tuple[str, ...] | None = None
    choices_message: str = "Invalid option"
    refinements: tuple[Refinement, ...] = ()
    transform: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.kind not in (STRING, NUMBER):
            raise ValueError(f"Unknown field kind: {self.kind}")

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def check(self, value: Any) -> list[str]:
        """Return the messages of every check the value fails."""
        if self.kind == NUMBER:
            return self._check_number(value)
        return self._check_string(value)

    def _check_string(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return ["Expected string"]

        messages = []
        if self.min_length is not None and len(value) < self.min_length:
            messages.append(
                self.min_length_message or f"Min {self.min_length} characters"
            )
        if self.max_length is not None and len(value) > self.max_length:
            messages.append(
                self.max_length_message or f"Max {self.max_length} characters"
            )
        if self.pattern is not None and self.pattern.fullmatch(value) is None:
            messages.append(self.pattern_message)
        if self.choices is not None and value not in self.choices:
            messages.append(self.choices_message)
        messages.extend(self._run_refinements(value))
        return messages

    def _check_number(self, value: Any) -> list[str]:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return ["Expected number"]
        if not math.isfinite(value):
            return [self.finite_message]

        messages = []
        if self.minimum is not None and value < self.minimum:
            messages.append(self.minimum_message or f"Must be >= {self.minimum}")
        if self.maximum is not None and value > self.maximum:
            messages.append(self.maximum_message or f"Must be <= {self.maximum}")
        messages.extend(self._run_refinements(value))
        return messages

    def _run_refinements(self, value: Any) -> list[str]:
        return [r.message for r in self.refinements if not r.predicate(value)]


@dataclass(frozen=True, slots=True)
class Schema:
    """Ordered collection of field rules."""

    name: str
    fields: tuple[FieldRule, ...]

    def __post_init__(self) -> None:
        names = [rule.name for rule in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field in schema {self.name}")

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self.fields)

    def get(self, name: str) -> FieldRule:
        for rule in self.fields:
            if rule.name == name:
                return rule
        raise KeyError(name)

    def pick(self, name: str, *names: str) -> "Schema":
        """Schema with only the named fields, in their original order."""
        wanted = {name, *names}
        return Schema(self.name, tuple(r for r in self.fields if r.name in wanted))

    def omit(self, name: str, *names: str) -> "Schema":
        unwanted = {name, *names}
        return Schema(self.name, tuple(r for r in self.fields if r.name not in unwanted))

    def extend(self, *rules: FieldRule, name: str | None = None) -> "Schema":
        """Schema with extra rules; a rule replaces an existing one of the same name."""
        replaced = {rule.name: rule for rule in rules}
        fields = [replaced.pop(r.name, r) for r in self.fields]
        fields.extend(r for r in rules if r.name in replaced)
        return Schema(name or self.name, tuple(fields))

    def partial(self, name: str | None = None) -> "Schema":
        """Schema in which every field is optional."""
        return Schema(
            name or self.name,
            tuple(replace(rule, required=False) for rule in self.fields),
        )


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Validated value or the issues that prevented it."""

    value: dict[str, Any] | None = None
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def first_issue(self) -> ValidationIssue | None:
        return self.issues[0] if self.issues else None

    @property
    def error(self) -> str | None:
        """Message to show the end user (one error at a time)."""
        issue = self.first_issue
        return issue.message if issue else None


def _is_absent(rule: FieldRule, value: Any) -> bool:
    if value is _MISSING or value is None:
        return True
    return rule.empty_as_missing and value == ""


def validate(schema: Schema, data: Mapping[str, Any]) -> ValidationResult:
    """Validate `data` against `schema`.

    Keys not declared by the schema are dropped from the output. Absent
    optional fields are omitted unless they are nullable or have a default.
    """
    output: dict[str, Any] = {}
    issues: list[ValidationIssue] = []

    for rule in schema.fields:
        value = data.get(rule.name, _MISSING)

        if _is_absent(rule, value):
            if rule.has_default:
                output[rule.name] = rule.default
            elif value is None and rule.nullable:
                output[rule.name] = None
            elif rule.required:
                issues.append(ValidationIssue((rule.name,), rule.required_message))
            continue

        messages = rule.check(value)
        if messages:
            issues.extend(ValidationIssue((rule.name,), message) for message in messages)
            continue

        output[rule.name] = rule.transform(value) if rule.transform else value

    if issues:
        return ValidationResult(issues=tuple(issues))
    return ValidationResult(value=output)
