"""
Entry snapshot returned to callers.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rbmap.models.node import Node


@dataclass(frozen=True)
class Entry:
    """
    Immutable key/value pair captured from a tree node.

    Later mutations of the tree never change a previously returned entry.
    Unpacks like a tuple: ``key, value = entry``.

    Attributes:
        key: The key at the time of the query.
        value: The value at the time of the query.
    """

    key: Any
    value: Any

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int) -> Any:
        return (self.key, self.value)[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Entry):
            return self.key == other.key and self.value == other.value
        if isinstance(other, tuple) and len(other) == 2:
            return self.key == other[0] and self.value == other[1]
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.key, self.value))

    def __repr__(self) -> str:
        return f"Entry({self.key!r}, {self.value!r})"


def export_entry(node: "Node | None") -> Entry | None:
    """Snapshot a tree node as an immutable Entry."""
    return None if node is None else Entry(node.key, node.value)
