"""
SortedContainer abstract base class for sorted key-value data structures.
"""

from abc import abstractmethod
from typing import Any

from rbmap.interfaces.range_iterable import RangeIterable


class SortedContainer(RangeIterable):
    """
    Abstract base class for sorted key-value containers.

    Provides O(log N) operations for put, get, and remove.
    Inherits range iteration capabilities from RangeIterable.

    Implementations:
    - TreeMap: the red-black tree engine
    - RangeView: a live bounded window onto a TreeMap
    """

    @abstractmethod
    def put(self, key: Any, value: Any) -> Any | None:
        """
        Insert or update a key-value pair.

        Args:
            key: The key to insert/update.
            value: The value to associate with the key.

        Returns:
            The previous value if the key was present, None otherwise.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def get(self, key: Any, default: Any = None) -> Any:
        """
        Retrieve the value for a given key.

        Args:
            key: The key to look up.
            default: Returned when the key is absent.

        Returns:
            The value if found, ``default`` otherwise.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def remove(self, key: Any) -> Any | None:
        """
        Remove a key-value pair.

        Args:
            key: The key to remove.

        Returns:
            The removed value if the key was found, None otherwise.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def contains_key(self, key: Any) -> bool:
        """
        Check if a key exists.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def size(self) -> int:
        """Return the number of key-value pairs."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key-value pair."""
        pass

    def is_empty(self) -> bool:
        return self.size() == 0

    def has(self, key: Any) -> bool:
        return self.contains_key(key)

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __contains__(self, key: Any) -> bool:
        return self.contains_key(key)

    def __getitem__(self, key: Any) -> Any:
        missing = _MISSING
        value = self.get(key, missing)
        if value is missing:
            raise KeyError(key)
        return value

    def __setitem__(self, key: Any, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Any) -> None:
        if not self.contains_key(key):
            raise KeyError(key)
        self.remove(key)


_MISSING = object()
