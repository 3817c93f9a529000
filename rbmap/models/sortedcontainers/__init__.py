"""
Sorted container implementations: the red-black tree map and its views.
"""

from rbmap.models.sortedcontainers.cursor import AsyncCursor, Cursor, CursorKind
from rbmap.models.sortedcontainers.collection_views import (
    ItemsView,
    KeysView,
    ValuesView,
)
from rbmap.models.sortedcontainers.range_view import Bound, RangeView
from rbmap.models.sortedcontainers.tree_map import TreeMap

__all__ = [
    "AsyncCursor",
    "Bound",
    "Cursor",
    "CursorKind",
    "ItemsView",
    "KeysView",
    "RangeView",
    "TreeMap",
    "ValuesView",
]
