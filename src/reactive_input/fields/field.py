"""
Field metadata and snapshot value types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ..core.errors import ErrorCode, FieldMetadataError


@runtime_checkable
class FieldMetadata(Protocol):
    """Anything that can describe an input: an identifier and a required flag."""

    @property
    def identifier(self) -> str: ...

    @property
    def required(self) -> bool: ...


@dataclass(frozen=True)
class Field:
    """
    Immutable description of one input.

    The identifier is the key used for matching results back to inputs, so it
    must be non-empty and unique within a tracked pool.
    """

    identifier: str
    required: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.identifier, str) or not self.identifier:
            raise FieldMetadataError(
                "Field identifier must be a non-empty string",
                code=ErrorCode.MISSING_FIELD_METADATA,
                context={"identifier": repr(self.identifier)},
            )

    @classmethod
    def from_metadata(cls, metadata: Any) -> Field:
        """
        Freeze any FieldMetadata-like object into a Field.

        Args:
            metadata: Object exposing ``identifier`` and ``required``

        Returns:
            Field instance

        Raises:
            FieldMetadataError: If metadata is None or lacks either attribute
        """
        if isinstance(metadata, Field):
            return metadata
        if metadata is None:
            raise FieldMetadataError("Field metadata is required to track an input")
        if not isinstance(metadata, FieldMetadata):
            raise FieldMetadataError(
                "Field metadata must provide 'identifier' and 'required'",
                context={"metadata_type": type(metadata).__name__},
            )
        return cls(identifier=metadata.identifier, required=bool(metadata.required))


@dataclass(frozen=True)
class FieldSnapshot:
    """Immutable copy of a field's identifier, content and required flag."""

    identifier: str
    content: str = ""
    required: bool = False

    @property
    def is_empty(self) -> bool:
        return len(self.content) == 0

    @property
    def is_not_empty(self) -> bool:
        return not self.is_empty

    @property
    def is_required(self) -> bool:
        return self.required

    def has_identifier(self, identifier: str) -> bool:
        """Check if this snapshot belongs to the given identifier."""
        return self.identifier == identifier

    def __str__(self) -> str:
        return f"id: {self.identifier}, Content: {self.content}, Required: {self.required}"
