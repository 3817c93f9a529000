"""
Tree cell for the red-black tree.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Color(IntEnum):
    """Node color for Red-Black Tree."""

    RED = 0
    BLACK = 1


@dataclass(eq=False)
class Node:
    """
    Node in the Red-Black Tree.

    Nodes compare by identity. ``parent`` is a back-reference used for
    upward traversal; the children are owned by the node.
    """

    key: Any
    value: Any
    color: Color = Color.RED
    left: "Node | None" = None
    right: "Node | None" = None
    parent: "Node | None" = None


def color_of(node: Node | None) -> Color:
    """Color of a possibly missing node; missing children count as black."""
    return Color.BLACK if node is None else node.color


def parent_of(node: Node | None) -> Node | None:
    return None if node is None else node.parent


def left_of(node: Node | None) -> Node | None:
    return None if node is None else node.left


def right_of(node: Node | None) -> Node | None:
    return None if node is None else node.right


def set_color(node: Node | None, color: Color) -> None:
    if node is not None:
        node.color = color


def successor(node: Node | None) -> Node | None:
    """Return the in-order successor of ``node``, or None."""
    if node is None:
        return None
    if node.right is not None:
        current = node.right
        while current.left is not None:
            current = current.left
        return current

    parent = node.parent
    child = node
    while parent is not None and child is parent.right:
        child = parent
        parent = parent.parent
    return parent


def predecessor(node: Node | None) -> Node | None:
    """Return the in-order predecessor of ``node``, or None."""
    if node is None:
        return None
    if node.left is not None:
        current = node.left
        while current.right is not None:
            current = current.right
        return current

    parent = node.parent
    child = node
    while parent is not None and child is parent.left:
        child = parent
        parent = parent.parent
    return parent
