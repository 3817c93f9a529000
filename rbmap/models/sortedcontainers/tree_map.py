"""
Red-Black Tree implementation of a sorted map.

O(log N) lookup, insertion, deletion and ordered navigation.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from rbmap.engine.builder import SortedTreeBuilder
from rbmap.engine.invariants import InvariantChecker
from rbmap.interfaces.navigable_map import NavigableMap
from rbmap.models.comparator import Comparator, resolve_comparator
from rbmap.models.entry import Entry, export_entry
from rbmap.models.exceptions import ConcurrentModificationError
from rbmap.models.node import (
    Color,
    Node,
    color_of,
    left_of,
    parent_of,
    right_of,
    set_color,
    successor,
)
from rbmap.models.sortedcontainers.collection_views import KeysView
from rbmap.models.sortedcontainers.cursor import Cursor, CursorKind
from rbmap.models.sortedcontainers.range_view import Bound, RangeView

logger = logging.getLogger(__name__)


class TreeMap(NavigableMap):
    """
    Red-Black Tree implementation of NavigableMap.

    Properties maintained:
    1. Every node is either red or black
    2. Root is always black
    3. Red nodes cannot have red children
    4. Every path from root to leaf has same number of black nodes
    5. In-order traversal yields strictly increasing keys

    ``mod_count`` is bumped once per structural insert or delete (and per
    clear or bulk build), never on value-only updates. Cursors compare it to
    detect modification behind their back.

    Not thread-safe: callers sharing a map across threads must synchronize.
    """

    def __init__(
        self,
        source: "Mapping[Any, Any] | Iterable[Any] | None" = None,
        comparator: "Comparator | Callable[[Any, Any], int] | None" = None,
    ) -> None:
        """
        Initialize the map.

        Args:
            source: Optional initial contents: a mapping, another sorted map,
                or an iterable of (key, value) pairs.
            comparator: Three-way ordering over keys. Defaults to natural
                ordering, or to the source's ordering when ``source`` is a
                sorted map.
        """
        if comparator is None and isinstance(source, NavigableMap):
            comparator = source.comparator
        self._comparator = resolve_comparator(comparator)
        self._root: Node | None = None
        self._size: int = 0
        self._mod_count: int = 0

        if source is not None:
            self.put_all(source)

    @classmethod
    def from_sorted(
        cls,
        items: Iterable[Any],
        comparator: "Comparator | Callable[[Any, Any], int] | None" = None,
        size: int | None = None,
    ) -> "TreeMap":
        """
        Build a map in linear time from pairs already in ascending key order.

        Args:
            items: (key, value) pairs with strictly increasing keys.
            comparator: Ordering the items are sorted by.
            size: Number of pairs to consume; defaults to ``len(items)``,
                materializing ``items`` first if it has no length.

        Raises:
            ValueError: The items are not strictly increasing or run short.
        """
        tree = cls(comparator=comparator)
        if size is None:
            if not hasattr(items, "__len__"):
                items = list(items)
            size = len(items)  # type: ignore[arg-type]
        tree._build_from_sorted(size, items, check_order=True)
        return tree

    # Properties

    @property
    def comparator(self) -> Comparator:
        return self._comparator

    @property
    def mod_count(self) -> int:
        return self._mod_count

    # SortedContainer

    def put(self, key: Any, value: Any) -> Any | None:
        """Insert or update a key-value pair. O(log N)"""
        compare = self._comparator.compare
        if self._root is None:
            # Type (and None) check before the key becomes the root
            self._comparator.check_key(key)
            self._root = Node(key=key, value=value, color=Color.BLACK)
            self._size = 1
            self._mod_count += 1
            return None

        # Find insertion point
        parent = self._root
        current: Node | None = self._root
        cmp = 0
        while current is not None:
            parent = current
            cmp = compare(key, current.key)
            if cmp < 0:
                current = current.left
            elif cmp > 0:
                current = current.right
            else:
                # Key exists, update value
                old_value = current.value
                current.value = value
                return old_value

        # Insert new node
        new_node = Node(key=key, value=value, parent=parent)
        if cmp < 0:
            parent.left = new_node
        else:
            parent.right = new_node

        self._size += 1
        self._mod_count += 1
        self._fix_insert(new_node)
        return None

    def get(self, key: Any, default: Any = None) -> Any:
        """Retrieve value by key. O(log N)"""
        node = self._find_node(key)
        return default if node is None else node.value

    def remove(self, key: Any) -> Any | None:
        """Remove a key-value pair and return its value. O(log N)"""
        node = self._find_node(key)
        if node is None:
            return None

        old_value = node.value
        self._delete_node(node)
        return old_value

    def contains_key(self, key: Any) -> bool:
        return self._find_node(key) is not None

    def size(self) -> int:
        return self._size

    def clear(self) -> None:
        self._mod_count += 1
        self._size = 0
        self._root = None
        logger.debug("Cleared tree map")

    # Bulk operations

    def put_all(self, source: "Mapping[Any, Any] | Iterable[Any]") -> None:
        """
        Copy every pair from ``source`` into this map.

        When this map is empty and ``source`` is a sorted map with the same
        ordering, the tree is built in linear time instead of N inserts.
        """
        if isinstance(source, NavigableMap):
            if (
                self._size == 0
                and source.comparator == self._comparator
                and source is not self
            ):
                count = source.size()
                if count:
                    self._build_from_sorted(count, source.entry_cursor())
                return
            pairs: Iterable[Any] = list(source.entry_cursor())
        elif isinstance(source, Mapping):
            pairs = source.items()
        else:
            pairs = source

        for key, value in pairs:
            self.put(key, value)

    def copy(self) -> "TreeMap":
        """Return an independent copy with the same comparator. O(N)"""
        clone = TreeMap(comparator=self._comparator)
        clone._build_from_sorted(self._size, self._iter_nodes_as_pairs())
        return clone

    __copy__ = copy

    def replace(self, key: Any, value: Any) -> Any | None:
        """Replace the value of an existing key; returns the old value or None."""
        node = self._find_node(key)
        if node is None:
            return None
        old_value = node.value
        node.value = value
        return old_value

    def replace_if(self, key: Any, old_value: Any, new_value: Any) -> bool:
        """Replace the value only if ``key`` currently maps to ``old_value``."""
        node = self._find_node(key)
        if node is None or node.value != old_value:
            return False
        node.value = new_value
        return True

    def replace_all(self, function: Callable[[Any, Any], Any]) -> None:
        """Set every value to ``function(key, value)``, in key order."""
        expected = self._mod_count
        node = self._first_node()
        while node is not None:
            node.value = function(node.key, node.value)
            if self._mod_count != expected:
                raise ConcurrentModificationError(expected, self._mod_count)
            node = successor(node)

    def validate(self) -> int:
        """
        Check every red-black invariant.

        Returns:
            The black-height of the tree.

        Raises:
            InvariantViolationError: An invariant does not hold.
        """
        return InvariantChecker(self._comparator).check(self._root, self._size)

    # Navigation

    def first_entry(self) -> Entry | None:
        return export_entry(self._first_node())

    def last_entry(self) -> Entry | None:
        return export_entry(self._last_node())

    def floor_entry(self, key: Any) -> Entry | None:
        return export_entry(self._floor_node(key))

    def ceiling_entry(self, key: Any) -> Entry | None:
        return export_entry(self._ceiling_node(key))

    def higher_entry(self, key: Any) -> Entry | None:
        return export_entry(self._higher_node(key))

    def lower_entry(self, key: Any) -> Entry | None:
        return export_entry(self._lower_node(key))

    def poll_first_entry(self) -> Entry | None:
        node = self._first_node()
        entry = export_entry(node)
        if node is not None:
            self._delete_node(node)
        return entry

    def poll_last_entry(self) -> Entry | None:
        node = self._last_node()
        entry = export_entry(node)
        if node is not None:
            self._delete_node(node)
        return entry

    # Views

    def head_view(self, hi: Any, inclusive: bool = False) -> RangeView:
        return RangeView(self, hi=Bound(hi, inclusive))

    def tail_view(self, lo: Any, inclusive: bool = True) -> RangeView:
        return RangeView(self, lo=Bound(lo, inclusive))

    def sub_view(
        self, lo: Any, lo_inclusive: bool, hi: Any, hi_inclusive: bool
    ) -> RangeView:
        return RangeView(self, lo=Bound(lo, lo_inclusive), hi=Bound(hi, hi_inclusive))

    def descending_view(self) -> RangeView:
        return RangeView(self, descending=True)

    def descending_keys(self) -> KeysView:
        return self.descending_view().keys()

    # Iteration

    def cursor(self, kind: CursorKind, descending: bool = False) -> Cursor:
        if descending:
            return Cursor(self, self._last_node(), kind=kind, forward=False)
        return Cursor(self, self._first_node(), kind=kind)

    def iterator(self, start: Any = None, end: Any = None) -> Cursor:
        """Ascending entries with ``start <= key < end``; None means unbounded."""
        if start is not None and end is not None and (
            self._comparator.compare(start, end) >= 0
        ):
            return Cursor(self, None)

        first = self._first_node() if start is None else self._ceiling_node(start)
        fence = None if end is None else self._ceiling_node(end)
        return Cursor(self, first, fence)

    # Search primitives

    def _find_node(self, key: Any) -> Node | None:
        """Find node by key."""
        compare = self._comparator.compare
        current = self._root
        if current is None and self._comparator.is_natural:
            self._comparator.check_key(key)
        while current is not None:
            cmp = compare(key, current.key)
            if cmp < 0:
                current = current.left
            elif cmp > 0:
                current = current.right
            else:
                return current
        return None

    def _first_node(self) -> Node | None:
        node = self._root
        if node is not None:
            while node.left is not None:
                node = node.left
        return node

    def _last_node(self) -> Node | None:
        node = self._root
        if node is not None:
            while node.right is not None:
                node = node.right
        return node

    def _ceiling_node(self, key: Any) -> Node | None:
        """Least node with key >= ``key``."""
        compare = self._comparator.compare
        best = None
        current = self._root
        while current is not None:
            cmp = compare(key, current.key)
            if cmp < 0:
                best = current
                current = current.left
            elif cmp > 0:
                current = current.right
            else:
                return current
        return best

    def _floor_node(self, key: Any) -> Node | None:
        """Greatest node with key <= ``key``."""
        compare = self._comparator.compare
        best = None
        current = self._root
        while current is not None:
            cmp = compare(key, current.key)
            if cmp > 0:
                best = current
                current = current.right
            elif cmp < 0:
                current = current.left
            else:
                return current
        return best

    def _higher_node(self, key: Any) -> Node | None:
        """Least node with key > ``key``."""
        compare = self._comparator.compare
        best = None
        current = self._root
        while current is not None:
            if compare(key, current.key) < 0:
                best = current
                current = current.left
            else:
                current = current.right
        return best

    def _lower_node(self, key: Any) -> Node | None:
        """Greatest node with key < ``key``."""
        compare = self._comparator.compare
        best = None
        current = self._root
        while current is not None:
            if compare(key, current.key) > 0:
                best = current
                current = current.right
            else:
                current = current.left
        return best

    def _iter_nodes_as_pairs(self) -> Iterator[tuple[Any, Any]]:
        node = self._first_node()
        while node is not None:
            yield node.key, node.value
            node = successor(node)

    def _build_from_sorted(
        self, count: int, source: Iterable[Any], check_order: bool = False
    ) -> None:
        """Replace the contents with a balanced tree built from sorted pairs."""
        builder = SortedTreeBuilder(
            count, source, self._comparator if check_order else None
        )
        self._root = builder.build()
        self._size = count
        self._mod_count += 1

    # Rebalancing

    def _fix_insert(self, node: Node) -> None:
        """Fix Red-Black Tree properties after insert."""
        node.color = Color.RED

        while node is not self._root and color_of(node.parent) == Color.RED:
            grandparent = self._grandparent(node)
            if parent_of(node) is left_of(grandparent):
                uncle = right_of(grandparent)

                if color_of(uncle) == Color.RED:
                    # Case 1: Uncle is red
                    set_color(parent_of(node), Color.BLACK)
                    set_color(uncle, Color.BLACK)
                    set_color(grandparent, Color.RED)
                    node = grandparent
                else:
                    if node is right_of(parent_of(node)):
                        # Case 2: Node is right child
                        node = parent_of(node)
                        self._rotate_left(node)

                    # Case 3: Node is left child
                    set_color(parent_of(node), Color.BLACK)
                    set_color(self._grandparent(node), Color.RED)
                    self._rotate_right(self._grandparent(node))
            else:
                uncle = left_of(grandparent)

                if color_of(uncle) == Color.RED:
                    set_color(parent_of(node), Color.BLACK)
                    set_color(uncle, Color.BLACK)
                    set_color(grandparent, Color.RED)
                    node = grandparent
                else:
                    if node is left_of(parent_of(node)):
                        node = parent_of(node)
                        self._rotate_right(node)

                    set_color(parent_of(node), Color.BLACK)
                    set_color(self._grandparent(node), Color.RED)
                    self._rotate_left(self._grandparent(node))

        self._root.color = Color.BLACK

    def _grandparent(self, node: Node) -> Node | None:
        """Get grandparent of node."""
        return parent_of(parent_of(node))

    def _rotate_left(self, node: Node | None) -> None:
        """Left rotation."""
        if node is None:
            return
        right_child = node.right
        if right_child is None:
            return

        node.right = right_child.left
        if right_child.left is not None:
            right_child.left.parent = node

        right_child.parent = node.parent

        if node.parent is None:
            self._root = right_child
        elif node is node.parent.left:
            node.parent.left = right_child
        else:
            node.parent.right = right_child

        right_child.left = node
        node.parent = right_child

    def _rotate_right(self, node: Node | None) -> None:
        """Right rotation."""
        if node is None:
            return
        left_child = node.left
        if left_child is None:
            return

        node.left = left_child.right
        if left_child.right is not None:
            left_child.right.parent = node

        left_child.parent = node.parent

        if node.parent is None:
            self._root = left_child
        elif node is node.parent.right:
            node.parent.right = left_child
        else:
            node.parent.left = left_child

        left_child.right = node
        node.parent = left_child

    def _delete_node(self, node: Node) -> None:
        """Delete a node from the tree and rebalance."""
        self._mod_count += 1
        self._size -= 1

        if node.left is not None and node.right is not None:
            # Node has two children - copy successor's data into it and
            # delete the successor instead
            s = successor(node)
            node.key = s.key
            node.value = s.value
            node = s

        # Node has at most one child
        replacement = node.left if node.left is not None else node.right

        if replacement is not None:
            self._replace_node(node, replacement)
            node.left = node.right = node.parent = None
            if node.color == Color.BLACK:
                self._fix_delete(replacement)
        elif node.parent is None:
            self._root = None
        else:
            # Leaf: rebalance while it still hangs in the tree, then unlink
            if node.color == Color.BLACK:
                self._fix_delete(node)
            self._replace_node(node, None)
            node.parent = None

    def _replace_node(self, node: Node, child: Node | None) -> None:
        """Replace node with child in tree."""
        if node.parent is None:
            self._root = child
        elif node is node.parent.left:
            node.parent.left = child
        else:
            node.parent.right = child

        if child is not None:
            child.parent = node.parent

    def _fix_delete(self, node: Node) -> None:
        """Fix Red-Black Tree properties after delete."""
        while node is not self._root and color_of(node) == Color.BLACK:
            if node is left_of(parent_of(node)):
                sibling = right_of(parent_of(node))

                if color_of(sibling) == Color.RED:
                    set_color(sibling, Color.BLACK)
                    set_color(parent_of(node), Color.RED)
                    self._rotate_left(parent_of(node))
                    sibling = right_of(parent_of(node))

                if (
                    color_of(left_of(sibling)) == Color.BLACK
                    and color_of(right_of(sibling)) == Color.BLACK
                ):
                    set_color(sibling, Color.RED)
                    node = parent_of(node)
                else:
                    if color_of(right_of(sibling)) == Color.BLACK:
                        set_color(left_of(sibling), Color.BLACK)
                        set_color(sibling, Color.RED)
                        self._rotate_right(sibling)
                        sibling = right_of(parent_of(node))

                    set_color(sibling, color_of(parent_of(node)))
                    set_color(parent_of(node), Color.BLACK)
                    set_color(right_of(sibling), Color.BLACK)
                    self._rotate_left(parent_of(node))
                    node = self._root
            else:
                sibling = left_of(parent_of(node))

                if color_of(sibling) == Color.RED:
                    set_color(sibling, Color.BLACK)
                    set_color(parent_of(node), Color.RED)
                    self._rotate_right(parent_of(node))
                    sibling = left_of(parent_of(node))

                if (
                    color_of(right_of(sibling)) == Color.BLACK
                    and color_of(left_of(sibling)) == Color.BLACK
                ):
                    set_color(sibling, Color.RED)
                    node = parent_of(node)
                else:
                    if color_of(left_of(sibling)) == Color.BLACK:
                        set_color(right_of(sibling), Color.BLACK)
                        set_color(sibling, Color.RED)
                        self._rotate_left(sibling)
                        sibling = left_of(parent_of(node))

                    set_color(sibling, color_of(parent_of(node)))
                    set_color(parent_of(node), Color.BLACK)
                    set_color(left_of(sibling), Color.BLACK)
                    self._rotate_right(parent_of(node))
                    node = self._root

        set_color(node, Color.BLACK)
