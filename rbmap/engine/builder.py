"""
SortedTreeBuilder - Linear-time tree construction from sorted input.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from rbmap.models.comparator import Comparator
from rbmap.models.node import Color, Node

logger = logging.getLogger(__name__)


def red_level(count: int) -> int:
    """
    Depth at which a balanced build of ``count`` nodes colors nodes red.

    Splitting at the midpoint fills every level above ``floor(log2(count+1))``
    completely and leaves that level partially filled. Coloring exactly the
    nodes of that level red gives every path the same number of black nodes.
    For ``count = 2**k - 1`` the level is empty and the tree is all black.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return (count + 1).bit_length() - 1


class SortedTreeBuilder:
    """
    Builds a balanced, validly colored red-black tree in one pass.

    Handles:
    - Consuming exactly ``count`` (key, value) pairs in ascending order
    - Splitting index ranges at the midpoint, left half first
    - Coloring the incomplete bottom level red, everything else black
    - Optionally verifying strict ordering while consuming
    """

    def __init__(
        self,
        count: int,
        source: Iterable[Any],
        comparator: Comparator | None = None,
    ) -> None:
        """
        Initialize builder.

        Args:
            count: Number of pairs to consume from ``source``.
            source: Iterable of (key, value) pairs (tuples or Entry objects)
                in strictly increasing key order.
            comparator: When given, each key is checked to be strictly greater
                than the previous one.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self._count = count
        self._source: Iterator[Any] = iter(source)
        self._comparator = comparator
        self._red_level = red_level(count)
        self._consumed = 0
        self._previous_key: Any = None

    def build(self) -> Node | None:
        """
        Build the tree.

        Returns:
            The root node, or None for ``count == 0``.

        Raises:
            ValueError: The source ran out early or was not strictly increasing.
        """
        root = self._build(0, 0, self._count - 1)
        logger.debug(
            f"Built tree of {self._count} nodes from sorted input "
            f"(red level {self._red_level})"
        )
        return root

    def _build(self, level: int, lo: int, hi: int) -> Node | None:
        # Depth is bounded by log2(count), so recursion stays shallow.
        if hi < lo:
            return None

        mid = (lo + hi) // 2

        left = None
        if lo < mid:
            left = self._build(level + 1, lo, mid - 1)

        key, value = self._next_pair()
        middle = Node(key=key, value=value, color=Color.BLACK)
        if level == self._red_level:
            middle.color = Color.RED

        if left is not None:
            middle.left = left
            left.parent = middle

        if mid < hi:
            right = self._build(level + 1, mid + 1, hi)
            middle.right = right
            right.parent = middle

        return middle

    def _next_pair(self) -> tuple[Any, Any]:
        try:
            key, value = next(self._source)
        except StopIteration:
            raise ValueError(
                f"Sorted source exhausted after {self._consumed} of "
                f"{self._count} pairs"
            ) from None

        if self._comparator is not None:
            if self._consumed > 0 and (
                self._comparator.compare(self._previous_key, key) >= 0
            ):
                raise ValueError(
                    f"Keys are not strictly increasing: {self._previous_key!r} "
                    f"is followed by {key!r}"
                )
            if self._consumed == 0:
                self._comparator.check_key(key)
        self._previous_key = key
        self._consumed += 1
        return key, value
