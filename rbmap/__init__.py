"""
Red-black tree backed sorted map.

This package provides an ordered associative container with:
- get/put/remove/contains_key - O(log N)
- floor/ceiling/higher/lower and first/last queries - O(log N)
- head_view/tail_view/sub_view/descending_view - live bounded views
- Fail-fast cursors that support removal mid-iteration
- TreeMap.from_sorted - O(N) bulk construction from sorted pairs
- rbmap.engine.serializer - persisted form that reloads in O(N)
"""

from rbmap.models.comparator import Comparator
from rbmap.models.entry import Entry
from rbmap.models.exceptions import (
    ConcurrentModificationError,
    EmptyMapError,
    IllegalCursorStateError,
    InvalidKeyError,
    InvariantViolationError,
    KeyOutOfRangeError,
    MapCorruptionError,
    NullKeyError,
    SerializationError,
    TreeMapError,
)
from rbmap.models.sortedcontainers import Cursor, CursorKind, RangeView, TreeMap

__all__ = [
    "Comparator",
    "ConcurrentModificationError",
    "Cursor",
    "CursorKind",
    "EmptyMapError",
    "Entry",
    "IllegalCursorStateError",
    "InvalidKeyError",
    "InvariantViolationError",
    "KeyOutOfRangeError",
    "MapCorruptionError",
    "NullKeyError",
    "RangeView",
    "SerializationError",
    "TreeMap",
    "TreeMapError",
]
