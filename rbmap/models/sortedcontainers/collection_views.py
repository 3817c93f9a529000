"""
Live key, value and item views over a navigable map.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from rbmap.models.entry import Entry
from rbmap.models.sortedcontainers.cursor import CursorKind

if TYPE_CHECKING:
    from rbmap.interfaces.navigable_map import NavigableMap


class _MapCollectionView:
    """Common base: the view reads through to its map on every call."""

    _kind: CursorKind

    def __init__(self, owner: "NavigableMap") -> None:
        self._owner = owner

    def __len__(self) -> int:
        return self._owner.size()

    def __iter__(self) -> Iterator[Any]:
        return self._owner.cursor(self._kind)

    def __reversed__(self) -> Iterator[Any]:
        return self._owner.cursor(self._kind, descending=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class KeysView(_MapCollectionView):
    """Keys of the map in its own order."""

    _kind = CursorKind.KEYS

    def __contains__(self, key: Any) -> bool:
        return self._owner.contains_key(key)

    def remove(self, key: Any) -> bool:
        """Remove ``key`` from the map. Returns True if it was present."""
        if not self._owner.contains_key(key):
            return False
        self._owner.remove(key)
        return True


class ValuesView(_MapCollectionView):
    """Values of the map, ordered by their keys."""

    _kind = CursorKind.VALUES

    def __contains__(self, value: Any) -> bool:
        return self._owner.contains_value(value)

    def remove(self, value: Any) -> bool:
        """Remove the first entry holding ``value``. Returns True on removal."""
        cursor = self._owner.value_cursor()
        for stored in cursor:
            if stored == value:
                cursor.remove()
                return True
        return False


class ItemsView(_MapCollectionView):
    """Entries of the map; membership also compares the value."""

    _kind = CursorKind.ENTRIES

    def __contains__(self, item: object) -> bool:
        key, value = _unpack(item)
        if key is _NOT_AN_ITEM:
            return False
        missing = object()
        stored = self._owner.get(key, missing)
        return stored is not missing and stored == value

    def remove(self, item: object) -> bool:
        """Remove the entry if its key currently maps to its value."""
        if item not in self:
            return False
        key, _ = _unpack(item)
        self._owner.remove(key)
        return True


def _unpack(item: object) -> tuple[Any, Any]:
    if isinstance(item, Entry):
        return item.key, item.value
    if isinstance(item, tuple) and len(item) == 2:
        return item[0], item[1]
    return _NOT_AN_ITEM, None


_NOT_AN_ITEM = object()
