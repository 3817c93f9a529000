"""
InvariantChecker - Verify the red-black properties of a tree.
"""

import logging
from typing import Any

from rbmap.models.comparator import Comparator
from rbmap.models.exceptions import InvariantViolationError
from rbmap.models.node import Color, Node

logger = logging.getLogger(__name__)


class InvariantChecker:
    """
    Walks a tree and checks the red-black invariants.

    Checks:
    1. Every node is red or black
    2. The root is black
    3. No red node has a red child
    4. Every path to a leaf has the same number of black nodes
    5. Keys strictly increase in order; parent links are consistent
    """

    def __init__(self, comparator: Comparator) -> None:
        self._comparator = comparator

    def check(self, root: Node | None, size: int | None = None) -> int:
        """
        Validate the tree rooted at ``root``.

        Args:
            root: Root node, or None for an empty tree.
            size: Expected node count, checked when given.

        Returns:
            The black-height: black nodes on any root-to-leaf path.

        Raises:
            InvariantViolationError: Any invariant is broken.
        """
        if root is None:
            if size:
                self._fail(f"empty tree but size is {size}")
            return 0

        if root.parent is not None:
            self._fail("root has a parent")
        if root.color != Color.BLACK:
            self._fail(f"root {root.key!r} is red")

        black_height, count = self._check_subtree(root, None, None)
        if size is not None and count != size:
            self._fail(f"tree holds {count} nodes but size is {size}")
        return black_height

    def _check_subtree(
        self, node: Node | None, lower: Any, upper: Any
    ) -> tuple[int, int]:
        if node is None:
            return 0, 0

        if node.color not in (Color.RED, Color.BLACK):
            self._fail(f"node {node.key!r} has invalid color {node.color!r}")

        if lower is not None and self._comparator.compare(lower[0], node.key) >= 0:
            self._fail(f"key {node.key!r} is out of order after {lower[0]!r}")
        if upper is not None and self._comparator.compare(node.key, upper[0]) >= 0:
            self._fail(f"key {node.key!r} is out of order before {upper[0]!r}")

        for child in (node.left, node.right):
            if child is None:
                continue
            if child.parent is not node:
                self._fail(f"node {child.key!r} has a stale parent link")
            if node.color == Color.RED and child.color == Color.RED:
                self._fail(f"red node {node.key!r} has red child {child.key!r}")

        left_height, left_count = self._check_subtree(node.left, lower, (node.key,))
        right_height, right_count = self._check_subtree(
            node.right, (node.key,), upper
        )
        if left_height != right_height:
            self._fail(
                f"black-height mismatch under {node.key!r}: "
                f"{left_height} on the left, {right_height} on the right"
            )

        own = 1 if node.color == Color.BLACK else 0
        return left_height + own, left_count + right_count + 1

    def _fail(self, message: str) -> None:
        logger.error(f"Red-black invariant violated: {message}")
        raise InvariantViolationError(message)
