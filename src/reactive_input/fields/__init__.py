"""
Field metadata, snapshots and observable field state.
"""

from .field import Field, FieldMetadata, FieldSnapshot
from .field_state import FieldState
from .streams import Subscription, combine_latest

__all__ = [
    "Field",
    "FieldMetadata",
    "FieldSnapshot",
    "FieldState",
    "Subscription",
    "combine_latest",
]
