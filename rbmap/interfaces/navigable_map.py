"""
NavigableMap abstract base class: ordered queries, views and cursors.
"""

from abc import abstractmethod
from collections.abc import AsyncIterator, Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from rbmap.interfaces.sorted_container import SortedContainer
from rbmap.models.entry import Entry
from rbmap.models.exceptions import EmptyMapError
from rbmap.models.sortedcontainers.collection_views import (
    ItemsView,
    KeysView,
    ValuesView,
)
from rbmap.models.sortedcontainers.cursor import AsyncCursor, Cursor, CursorKind

if TYPE_CHECKING:
    from rbmap.models.comparator import Comparator
    from rbmap.models.sortedcontainers.range_view import RangeView


class NavigableMap(SortedContainer):
    """
    A SortedContainer that can answer ordered queries.

    Implementations provide the entry-returning primitives; the key-returning
    variants, Python protocol methods and cursor shortcuts are derived here.
    """

    @property
    @abstractmethod
    def comparator(self) -> "Comparator":
        """The ordering used by this map, in the map's own direction."""
        pass

    @abstractmethod
    def first_entry(self) -> Entry | None:
        pass

    @abstractmethod
    def last_entry(self) -> Entry | None:
        pass

    @abstractmethod
    def floor_entry(self, key: Any) -> Entry | None:
        """Entry with the greatest key less than or equal to ``key``."""
        pass

    @abstractmethod
    def ceiling_entry(self, key: Any) -> Entry | None:
        """Entry with the least key greater than or equal to ``key``."""
        pass

    @abstractmethod
    def higher_entry(self, key: Any) -> Entry | None:
        """Entry with the least key strictly greater than ``key``."""
        pass

    @abstractmethod
    def lower_entry(self, key: Any) -> Entry | None:
        """Entry with the greatest key strictly less than ``key``."""
        pass

    @abstractmethod
    def poll_first_entry(self) -> Entry | None:
        """Remove and return the first entry, or None when empty."""
        pass

    @abstractmethod
    def poll_last_entry(self) -> Entry | None:
        """Remove and return the last entry, or None when empty."""
        pass

    @abstractmethod
    def head_view(self, hi: Any, inclusive: bool = False) -> "RangeView":
        """Live view of the keys before ``hi``."""
        pass

    @abstractmethod
    def tail_view(self, lo: Any, inclusive: bool = True) -> "RangeView":
        """Live view of the keys from ``lo`` onward."""
        pass

    @abstractmethod
    def sub_view(
        self, lo: Any, lo_inclusive: bool, hi: Any, hi_inclusive: bool
    ) -> "RangeView":
        """Live view of the keys between ``lo`` and ``hi``."""
        pass

    @abstractmethod
    def descending_view(self) -> "RangeView":
        """Live view of the same keys in reverse order."""
        pass

    @abstractmethod
    def cursor(self, kind: CursorKind, descending: bool = False) -> Cursor:
        """
        Return a fail-fast cursor over this map.

        Args:
            kind: Whether the cursor yields keys, values or entries.
            descending: Walk in reverse of this map's own order.
        """
        pass

    @abstractmethod
    def iterator(self, start: Any = None, end: Any = None) -> Iterator[Entry]:
        pass

    # Derived key queries

    def first_key(self) -> Any:
        """
        Return the first key.

        Raises:
            EmptyMapError: The map is empty.
        """
        entry = self.first_entry()
        if entry is None:
            raise EmptyMapError("first_key() on an empty map")
        return entry.key

    def last_key(self) -> Any:
        """
        Return the last key.

        Raises:
            EmptyMapError: The map is empty.
        """
        entry = self.last_entry()
        if entry is None:
            raise EmptyMapError("last_key() on an empty map")
        return entry.key

    def floor_key(self, key: Any) -> Any | None:
        return _key_or_none(self.floor_entry(key))

    def ceiling_key(self, key: Any) -> Any | None:
        return _key_or_none(self.ceiling_entry(key))

    def higher_key(self, key: Any) -> Any | None:
        return _key_or_none(self.higher_entry(key))

    def lower_key(self, key: Any) -> Any | None:
        return _key_or_none(self.lower_entry(key))

    # Cursors

    def key_cursor(self) -> Cursor:
        return self.cursor(CursorKind.KEYS)

    def value_cursor(self) -> Cursor:
        return self.cursor(CursorKind.VALUES)

    def entry_cursor(self) -> Cursor:
        return self.cursor(CursorKind.ENTRIES)

    def descending_key_cursor(self) -> Cursor:
        return self.cursor(CursorKind.KEYS, descending=True)

    def descending_value_cursor(self) -> Cursor:
        return self.cursor(CursorKind.VALUES, descending=True)

    def descending_entry_cursor(self) -> Cursor:
        return self.cursor(CursorKind.ENTRIES, descending=True)

    def __iter__(self) -> Iterator[Entry]:
        return self.entry_cursor()

    def __reversed__(self) -> Iterator[Entry]:
        return self.descending_entry_cursor()

    def __aiter__(self) -> AsyncIterator[Entry]:
        return self.async_iterator()

    def async_iterator(
        self, start: Any = None, end: Any = None
    ) -> AsyncIterator[Entry]:
        return AsyncCursor(self.iterator(start, end))

    # Collection views

    def keys(self) -> KeysView:
        return KeysView(self)

    def values(self) -> ValuesView:
        return ValuesView(self)

    def items(self) -> ItemsView:
        return ItemsView(self)

    # Bulk helpers

    def contains_value(self, value: Any) -> bool:
        """Check if any key maps to ``value``. O(N)"""
        for stored in self.value_cursor():
            if stored == value:
                return True
        return False

    def for_each(self, action: Callable[[Any, Any], None]) -> None:
        """Call ``action(key, value)`` for every entry in order."""
        for key, value in self.entry_cursor():
            action(key, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (NavigableMap, Mapping)):
            return NotImplemented
        if self.size() != len(other):
            return False
        missing = object()
        for key, value in self.entry_cursor():
            try:
                if other.get(key, missing) != value:
                    return False
            except TypeError:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.entry_cursor())
        return f"{type(self).__name__}({{{body}}})"


def _key_or_none(entry: Entry | None) -> Any | None:
    return None if entry is None else entry.key
