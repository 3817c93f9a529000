"""
Fail-fast cursors over the red-black tree and its range views.
"""

from collections.abc import AsyncIterator, Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any

from rbmap.models.entry import Entry
from rbmap.models.exceptions import (
    ConcurrentModificationError,
    IllegalCursorStateError,
)
from rbmap.models.node import Node, predecessor, successor

if TYPE_CHECKING:
    from rbmap.models.sortedcontainers.tree_map import TreeMap


class CursorKind(Enum):
    """What a cursor yields for each node it visits."""

    KEYS = "keys"
    VALUES = "values"
    ENTRIES = "entries"


# Fence key of a cursor that runs to the end of the tree.
_UNBOUNDED = object()


class Cursor(Iterator[Any]):
    """
    Forward or backward walk over tree nodes.

    Captures the tree's modification counter on creation and checks it on
    every step; any structural change not made through this cursor raises
    ConcurrentModificationError. ``remove()`` deletes the element returned
    last and keeps the walk valid.

    A range-view cursor stops at its fence node, the first node outside the
    view in the direction of travel. The fence is compared by key identity:
    deletion may move a key into another node, and the fence must follow it.
    """

    def __init__(
        self,
        tree: "TreeMap",
        first: Node | None,
        fence: Node | None = None,
        kind: CursorKind = CursorKind.ENTRIES,
        forward: bool = True,
    ) -> None:
        self._tree = tree
        self._next = first
        self._last_returned: Node | None = None
        self._fence_key = _UNBOUNDED if fence is None else fence.key
        self._kind = kind
        self._forward = forward
        self._expected_mod_count = tree.mod_count

    @property
    def kind(self) -> CursorKind:
        return self._kind

    @property
    def forward(self) -> bool:
        return self._forward

    def __iter__(self) -> "Cursor":
        return self

    def has_next(self) -> bool:
        return self._next is not None and self._next.key is not self._fence_key

    def __next__(self) -> Any:
        self._check_for_comodification()
        if not self.has_next():
            raise StopIteration

        node = self._next
        self._next = successor(node) if self._forward else predecessor(node)
        self._last_returned = node
        return self._project(node)

    def remove(self) -> None:
        """
        Remove the element most recently returned by this cursor.

        Raises:
            IllegalCursorStateError: Nothing was returned since the last remove.
            ConcurrentModificationError: The tree changed behind the cursor.
        """
        if self._last_returned is None:
            raise IllegalCursorStateError(
                "remove() requires a preceding call to next()"
            )
        self._check_for_comodification()

        node = self._last_returned
        # A node with two children takes its successor's key and value, so
        # a forward walk has to revisit it.
        if self._forward and node.left is not None and node.right is not None:
            self._next = node
        self._tree._delete_node(node)
        self._expected_mod_count = self._tree.mod_count
        self._last_returned = None

    def _check_for_comodification(self) -> None:
        if self._tree.mod_count != self._expected_mod_count:
            raise ConcurrentModificationError(
                self._expected_mod_count, self._tree.mod_count
            )

    def _project(self, node: Node) -> Any:
        if self._kind is CursorKind.KEYS:
            return node.key
        if self._kind is CursorKind.VALUES:
            return node.value
        return Entry(node.key, node.value)


class AsyncCursor(AsyncIterator[Any]):
    """Async iterator over an in-memory cursor (no I/O, never suspends)."""

    def __init__(self, cursor: Iterator[Any]) -> None:
        self._cursor = cursor

    def __aiter__(self) -> "AsyncCursor":
        return self

    async def __anext__(self) -> Any:
        try:
            return next(self._cursor)
        except StopIteration:
            raise StopAsyncIteration from None

    def remove(self) -> None:
        if not isinstance(self._cursor, Cursor):
            raise IllegalCursorStateError("range iterator does not support remove()")
        self._cursor.remove()
