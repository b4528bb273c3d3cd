"""
Validation results and their ordered aggregate.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..fields.field import FieldSnapshot


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field. An empty error means success."""

    key: str
    value: str = ""
    error: str = ""

    @property
    def has_error(self) -> bool:
        return len(self.error) > 0

    @classmethod
    def success(cls, snapshot: FieldSnapshot) -> ValidationResult:
        return cls(key=snapshot.identifier, value=snapshot.content)

    @classmethod
    def failure(cls, snapshot: FieldSnapshot, error: str) -> ValidationResult:
        return cls(key=snapshot.identifier, value=snapshot.content, error=error)

    def __str__(self) -> str:
        return f"hasError: {self.has_error}, value: {self.value}, error: {self.error}"


@dataclass(frozen=True)
class NotificationSet:
    """
    Ordered, immutable collection of ValidationResult.

    Order is the order results were given in. Results are never deduplicated
    by key, so validating the same field twice yields two entries.
    """

    results: tuple[ValidationResult, ...] = ()

    @classmethod
    def build(cls, results: Iterable[ValidationResult]) -> NotificationSet:
        return cls(results=tuple(results))

    def appended(self, result: ValidationResult) -> NotificationSet:
        """Return a new set with result added at the end."""
        return NotificationSet(results=(*self.results, result))

    @property
    def has_errors(self) -> bool:
        return any(result.has_error for result in self.results)

    def has_error(self, error: str) -> bool:
        """Check if at least one result carries exactly this error text."""
        return any(result.error == error for result in self.results)

    @property
    def valid_results(self) -> tuple[ValidationResult, ...]:
        return tuple(result for result in self.results if not result.has_error)

    @property
    def error_results(self) -> tuple[ValidationResult, ...]:
        return tuple(result for result in self.results if result.has_error)

    def error_messages(self) -> dict[str, str]:
        """Map each failing key to its first error message."""
        messages: dict[str, str] = {}
        for result in self.error_results:
            messages.setdefault(result.key, result.error)
        return messages

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ValidationResult]:
        return iter(self.results)

    def __str__(self) -> str:
        return f"hasErrors: {self.has_errors}, components: {[str(r) for r in self.results]}"
