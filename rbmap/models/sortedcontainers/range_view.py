"""
RangeView - live bounded (and optionally reversed) window onto a TreeMap.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rbmap.interfaces.navigable_map import NavigableMap
from rbmap.models.comparator import Comparator
from rbmap.models.entry import Entry, export_entry
from rbmap.models.exceptions import KeyOutOfRangeError
from rbmap.models.node import Node
from rbmap.models.sortedcontainers.cursor import Cursor, CursorKind

if TYPE_CHECKING:
    from rbmap.models.sortedcontainers.tree_map import TreeMap


@dataclass(frozen=True)
class Bound:
    """One end of a range view. A missing Bound means unbounded."""

    key: Any
    inclusive: bool


class RangeView(NavigableMap):
    """
    Live view of the keys of a TreeMap between two optional bounds.

    Every query is answered by an absolute query on the backing tree,
    filtered by the bounds, then expressed in the view's direction: a
    descending view's first entry is the backing tree's last in-range entry.
    Changes made through the view or the tree are visible to both.
    """

    def __init__(
        self,
        tree: "TreeMap",
        lo: Bound | None = None,
        hi: Bound | None = None,
        descending: bool = False,
    ) -> None:
        """
        Initialize the view.

        Args:
            tree: The backing map.
            lo: Lower bound in the tree's (ascending) order.
            hi: Upper bound in the tree's (ascending) order.
            descending: Present the range in reverse order.

        Raises:
            ValueError: ``lo`` is greater than ``hi``.
            InvalidKeyError: A bound cannot be compared with the tree's keys.
        """
        compare = tree.comparator.compare
        if lo is not None and hi is not None:
            if compare(lo.key, hi.key) > 0:
                raise ValueError(f"lo {lo.key!r} is greater than hi {hi.key!r}")
        else:
            if lo is not None:
                tree.comparator.check_key(lo.key)
            if hi is not None:
                tree.comparator.check_key(hi.key)

        self._tree = tree
        self._lo = lo
        self._hi = hi
        self._descending = descending
        self._cached_size = -1
        self._cached_size_mod_count = -1

    @property
    def lo(self) -> Bound | None:
        return self._lo

    @property
    def hi(self) -> Bound | None:
        return self._hi

    @property
    def descending(self) -> bool:
        return self._descending

    @property
    def comparator(self) -> Comparator:
        if self._descending:
            return self._tree.comparator.reversed()
        return self._tree.comparator

    # Bound checks, in the tree's ascending order

    def _too_low(self, key: Any) -> bool:
        if self._lo is None:
            return False
        cmp = self._tree.comparator.compare(key, self._lo.key)
        return cmp < 0 or (cmp == 0 and not self._lo.inclusive)

    def _too_high(self, key: Any) -> bool:
        if self._hi is None:
            return False
        cmp = self._tree.comparator.compare(key, self._hi.key)
        return cmp > 0 or (cmp == 0 and not self._hi.inclusive)

    def _in_range(self, key: Any) -> bool:
        return not self._too_low(key) and not self._too_high(key)

    def _in_closed_range(self, key: Any) -> bool:
        compare = self._tree.comparator.compare
        return (self._lo is None or compare(key, self._lo.key) >= 0) and (
            self._hi is None or compare(self._hi.key, key) >= 0
        )

    def _check_bound(self, key: Any, inclusive: bool) -> None:
        # An exclusive bound may sit on an exclusive bound of this view.
        inside = self._in_range(key) if inclusive else self._in_closed_range(key)
        if not inside:
            raise KeyOutOfRangeError(key)

    # Absolute queries

    def _abs_lowest(self) -> Node | None:
        if self._lo is None:
            node = self._tree._first_node()
        elif self._lo.inclusive:
            node = self._tree._ceiling_node(self._lo.key)
        else:
            node = self._tree._higher_node(self._lo.key)
        return None if node is None or self._too_high(node.key) else node

    def _abs_highest(self) -> Node | None:
        if self._hi is None:
            node = self._tree._last_node()
        elif self._hi.inclusive:
            node = self._tree._floor_node(self._hi.key)
        else:
            node = self._tree._lower_node(self._hi.key)
        return None if node is None or self._too_low(node.key) else node

    def _abs_ceiling(self, key: Any) -> Node | None:
        if self._too_low(key):
            return self._abs_lowest()
        node = self._tree._ceiling_node(key)
        return None if node is None or self._too_high(node.key) else node

    def _abs_higher(self, key: Any) -> Node | None:
        if self._too_low(key):
            return self._abs_lowest()
        node = self._tree._higher_node(key)
        return None if node is None or self._too_high(node.key) else node

    def _abs_floor(self, key: Any) -> Node | None:
        if self._too_high(key):
            return self._abs_highest()
        node = self._tree._floor_node(key)
        return None if node is None or self._too_low(node.key) else node

    def _abs_lower(self, key: Any) -> Node | None:
        if self._too_high(key):
            return self._abs_highest()
        node = self._tree._lower_node(key)
        return None if node is None or self._too_low(node.key) else node

    def _abs_high_fence(self) -> Node | None:
        """First node past the upper bound, where ascending walks stop."""
        if self._hi is None:
            return None
        if self._hi.inclusive:
            return self._tree._higher_node(self._hi.key)
        return self._tree._ceiling_node(self._hi.key)

    def _abs_low_fence(self) -> Node | None:
        """First node past the lower bound, where descending walks stop."""
        if self._lo is None:
            return None
        if self._lo.inclusive:
            return self._tree._lower_node(self._lo.key)
        return self._tree._floor_node(self._lo.key)

    # Queries in the view's own direction

    def _sub_lowest(self) -> Node | None:
        return self._abs_highest() if self._descending else self._abs_lowest()

    def _sub_highest(self) -> Node | None:
        return self._abs_lowest() if self._descending else self._abs_highest()

    def _sub_ceiling(self, key: Any) -> Node | None:
        return self._abs_floor(key) if self._descending else self._abs_ceiling(key)

    def _sub_higher(self, key: Any) -> Node | None:
        return self._abs_lower(key) if self._descending else self._abs_higher(key)

    def _sub_floor(self, key: Any) -> Node | None:
        return self._abs_ceiling(key) if self._descending else self._abs_floor(key)

    def _sub_lower(self, key: Any) -> Node | None:
        return self._abs_higher(key) if self._descending else self._abs_lower(key)

    def _sub_fence(self) -> Node | None:
        return self._abs_low_fence() if self._descending else self._abs_high_fence()

    # SortedContainer

    def get(self, key: Any, default: Any = None) -> Any:
        if not self._in_range(key):
            return default
        return self._tree.get(key, default)

    def put(self, key: Any, value: Any) -> Any | None:
        """
        Insert or update a key inside the view's bounds.

        Raises:
            KeyOutOfRangeError: ``key`` lies outside the view.
        """
        if not self._in_range(key):
            raise KeyOutOfRangeError(key)
        return self._tree.put(key, value)

    def remove(self, key: Any) -> Any | None:
        if not self._in_range(key):
            return None
        return self._tree.remove(key)

    def contains_key(self, key: Any) -> bool:
        return self._in_range(key) and self._tree.contains_key(key)

    def size(self) -> int:
        """Number of keys in range. O(1) when unbounded, else O(K) and cached."""
        if self._lo is None and self._hi is None:
            return self._tree.size()
        if self._cached_size_mod_count != self._tree.mod_count:
            count = 0
            for _ in self.cursor(CursorKind.KEYS):
                count += 1
            self._cached_size = count
            self._cached_size_mod_count = self._tree.mod_count
        return self._cached_size

    def is_empty(self) -> bool:
        if self._lo is None and self._hi is None:
            return self._tree.size() == 0
        return self._abs_lowest() is None

    def clear(self) -> None:
        """Remove every key in range from the backing tree."""
        if self._lo is None and self._hi is None:
            self._tree.clear()
            return
        cursor = self.cursor(CursorKind.KEYS)
        for _ in cursor:
            cursor.remove()

    def copy(self) -> "TreeMap":
        """Copy the visible entries into a new, independent TreeMap."""
        return type(self._tree)(self)

    # Navigation

    def first_entry(self) -> Entry | None:
        return export_entry(self._sub_lowest())

    def last_entry(self) -> Entry | None:
        return export_entry(self._sub_highest())

    def floor_entry(self, key: Any) -> Entry | None:
        return export_entry(self._sub_floor(key))

    def ceiling_entry(self, key: Any) -> Entry | None:
        return export_entry(self._sub_ceiling(key))

    def higher_entry(self, key: Any) -> Entry | None:
        return export_entry(self._sub_higher(key))

    def lower_entry(self, key: Any) -> Entry | None:
        return export_entry(self._sub_lower(key))

    def poll_first_entry(self) -> Entry | None:
        node = self._sub_lowest()
        entry = export_entry(node)
        if node is not None:
            self._tree._delete_node(node)
        return entry

    def poll_last_entry(self) -> Entry | None:
        node = self._sub_highest()
        entry = export_entry(node)
        if node is not None:
            self._tree._delete_node(node)
        return entry

    # Views

    def head_view(self, hi: Any, inclusive: bool = False) -> "RangeView":
        self._check_bound(hi, inclusive)
        if self._descending:
            return RangeView(self._tree, Bound(hi, inclusive), self._hi, True)
        return RangeView(self._tree, self._lo, Bound(hi, inclusive), False)

    def tail_view(self, lo: Any, inclusive: bool = True) -> "RangeView":
        self._check_bound(lo, inclusive)
        if self._descending:
            return RangeView(self._tree, self._lo, Bound(lo, inclusive), True)
        return RangeView(self._tree, Bound(lo, inclusive), self._hi, False)

    def sub_view(
        self, lo: Any, lo_inclusive: bool, hi: Any, hi_inclusive: bool
    ) -> "RangeView":
        self._check_bound(lo, lo_inclusive)
        self._check_bound(hi, hi_inclusive)
        if self._descending:
            return RangeView(
                self._tree, Bound(hi, hi_inclusive), Bound(lo, lo_inclusive), True
            )
        return RangeView(
            self._tree, Bound(lo, lo_inclusive), Bound(hi, hi_inclusive), False
        )

    def descending_view(self) -> "RangeView":
        return RangeView(self._tree, self._lo, self._hi, not self._descending)

    # Iteration

    def cursor(self, kind: CursorKind, descending: bool = False) -> Cursor:
        if self._descending == descending:
            return Cursor(
                self._tree, self._abs_lowest(), self._abs_high_fence(), kind, True
            )
        return Cursor(
            self._tree, self._abs_highest(), self._abs_low_fence(), kind, False
        )

    def iterator(self, start: Any = None, end: Any = None) -> Cursor:
        """Entries from ``start`` (inclusive) to ``end`` (exclusive) in view order."""
        forward = not self._descending
        if start is not None and end is not None and (
            self.comparator.compare(start, end) >= 0
        ):
            return Cursor(self._tree, None)

        first = self._sub_lowest() if start is None else self._sub_ceiling(start)
        fence = self._sub_fence()
        if end is not None:
            end_node = self._sub_ceiling(end)
            if end_node is not None:
                fence = end_node
        return Cursor(self._tree, first, fence, CursorKind.ENTRIES, forward)
