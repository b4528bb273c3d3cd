"""
Observable holder for one input's content.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, Signal

from ..core.errors import ErrorCode, FieldMetadataError
from .field import Field, FieldSnapshot
from .streams import Subscription


class FieldState(QObject):
    """
    Live, observable content of one input.

    Every assignment to ``content`` emits ``contentChanged`` with a fresh
    FieldSnapshot, even when the value did not change. Use ``observe`` rather
    than connecting to the signal directly to also receive the current value.

    Two FieldState objects are equal when their identifiers match.
    """

    contentChanged = Signal(object)  # FieldSnapshot

    def __init__(self, metadata: Any, parent: QObject | None = None):
        """
        Args:
            metadata: A Field or any object exposing ``identifier`` and ``required``
            parent: Parent QObject for lifetime management

        Raises:
            FieldMetadataError: If metadata is missing or malformed
        """
        super().__init__(parent)
        self._field = Field.from_metadata(metadata)
        self._content = ""
        self.setObjectName(f"FieldState-{self._field.identifier}")

    @property
    def field(self) -> Field:
        return self._field

    @property
    def identifier(self) -> str:
        return self._field.identifier

    @property
    def is_required(self) -> bool:
        return self._field.required

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        self.set_content(value)

    @property
    def is_empty(self) -> bool:
        return len(self._content) == 0

    @property
    def is_not_empty(self) -> bool:
        return not self.is_empty

    def has_identifier(self, identifier: str) -> bool:
        return self._field.identifier == identifier

    def set_content(self, value: str) -> None:
        """
        Replace the content and publish the new snapshot.

        Args:
            value: New text content

        Raises:
            FieldMetadataError: If value is not a string
        """
        if not isinstance(value, str):
            raise FieldMetadataError(
                f"Content of '{self.identifier}' must be a string",
                code=ErrorCode.INVALID_FIELD_CONTENT,
                context={"value_type": type(value).__name__},
            )
        self._content = value
        self.contentChanged.emit(self.snapshot())

    def snapshot(self) -> FieldSnapshot:
        """Return an immutable copy of the current state."""
        return FieldSnapshot(
            identifier=self._field.identifier,
            content=self._content,
            required=self._field.required,
        )

    def observe(self, slot: Callable[[FieldSnapshot], None]) -> Subscription:
        """
        Subscribe to content changes, starting with the current snapshot.

        Args:
            slot: Called with the current snapshot right away, then with a new
                snapshot after every content assignment

        Returns:
            Subscription; dispose it to stop receiving snapshots

        If slot raises on the current snapshot, the exception propagates and
        nothing stays connected.
        """
        subscription = Subscription()
        subscription.connect(self.contentChanged, slot)
        try:
            slot(self.snapshot())
        except Exception:
            subscription.dispose()
            raise
        return subscription

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldState):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash(self.identifier)

    def __str__(self) -> str:
        return f"id: {self.identifier}, Content: {self.content}, Required: {self.is_required}"

    def __repr__(self) -> str:
        return f"FieldState({self.identifier!r}, content={self.content!r}, required={self.is_required})"
