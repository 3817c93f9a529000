"""
Comparator abstraction: a total order over keys.
"""

from collections.abc import Callable
from typing import Any

from rbmap.models.exceptions import InvalidKeyError, NullKeyError


def _natural_compare(a: Any, b: Any) -> int:
    if a is None or b is None:
        raise NullKeyError()
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError as e:
        raise InvalidKeyError(a, str(e)) from e
    return 0


class Comparator:
    """
    Three-way ordering function over keys.

    Wraps ``fn(a, b) -> int`` returning a negative number, zero or a positive
    number. ``name`` is the descriptor written by the serializer so that a
    persisted map can be reloaded with the same ordering.
    """

    NATURAL = "natural"
    REVERSE = "reverse"
    CUSTOM = "custom"

    def __init__(
        self,
        fn: Callable[[Any, Any], int],
        name: str | None = None,
        *,
        _reversed_of: "Comparator | None" = None,
    ) -> None:
        if not callable(fn):
            raise ValueError(f"comparator function must be callable, got {fn!r}")
        self._fn = fn
        self.name = name or self.CUSTOM
        self._reversed_of = _reversed_of

    @classmethod
    def natural(cls) -> "Comparator":
        """Order keys by their own ``<`` and ``>``; rejects None keys."""
        return _NATURAL

    @classmethod
    def reverse_natural(cls) -> "Comparator":
        return _REVERSE

    @property
    def is_natural(self) -> bool:
        return self is _NATURAL

    def compare(self, a: Any, b: Any) -> int:
        """
        Compare two keys.

        Raises:
            NullKeyError: A key is None under natural ordering.
            InvalidKeyError: The keys cannot be ordered against each other.
        """
        try:
            return self._fn(a, b)
        except InvalidKeyError:
            raise
        except TypeError as e:
            raise InvalidKeyError(a, str(e)) from e

    __call__ = compare

    def check_key(self, key: Any) -> None:
        """Type-check a key by comparing it with itself."""
        self.compare(key, key)

    def reversed(self) -> "Comparator":
        """Return the mirror ordering; reversing twice gives back the original."""
        if self._reversed_of is not None:
            return self._reversed_of
        if self is _NATURAL:
            return _REVERSE
        fn = self._fn
        return Comparator(
            lambda a, b: fn(b, a), f"reversed:{self.name}", _reversed_of=self
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Comparator):
            return NotImplemented
        if self is other:
            return True
        if self._reversed_of is not None and other._reversed_of is not None:
            return self._reversed_of == other._reversed_of
        return (
            self._reversed_of is None
            and other._reversed_of is None
            and self._fn is other._fn
        )

    def __hash__(self) -> int:
        if self._reversed_of is not None:
            return hash(("reversed", hash(self._reversed_of)))
        return hash(id(self._fn))

    def __repr__(self) -> str:
        return f"Comparator({self.name!r})"


_NATURAL = Comparator(_natural_compare, Comparator.NATURAL)
_REVERSE = Comparator(
    lambda a, b: _natural_compare(b, a), Comparator.REVERSE, _reversed_of=_NATURAL
)


def resolve_comparator(
    comparator: "Comparator | Callable[[Any, Any], int] | None",
) -> Comparator:
    """Accept a Comparator, a bare three-way function, or None (natural order)."""
    if comparator is None:
        return Comparator.natural()
    if isinstance(comparator, Comparator):
        return comparator
    return Comparator(comparator)
