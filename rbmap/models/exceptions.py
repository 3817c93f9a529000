"""
Custom exceptions for the sorted map.

Every exception also derives from the closest builtin so callers can keep
catching ``TypeError``, ``ValueError``, ``LookupError`` and friends.
"""


class TreeMapError(Exception):
    """Base class for all sorted map errors."""


class InvalidKeyError(TreeMapError, TypeError):
    """
    Raised when a key cannot be ordered against the keys already stored.

    Raised at the point of comparison, before any structural change.
    """

    def __init__(self, key: object, reason: str | None = None):
        """
        Initialize invalid key error.

        Args:
            key: The offending key.
            reason: Optional detail, usually the underlying TypeError text.
        """
        self.key = key
        message = f"Key {key!r} is not comparable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NullKeyError(InvalidKeyError):
    """Raised when ``None`` is used as a key under natural ordering."""

    def __init__(self) -> None:
        super().__init__(None, "None keys are not allowed under natural ordering")


class KeyOutOfRangeError(TreeMapError, ValueError):
    """Raised when a key falls outside the bounds of a range view."""

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"Key {key!r} is out of the view's range")


class ConcurrentModificationError(TreeMapError, RuntimeError):
    """
    Raised by a cursor when the tree was structurally modified behind it.

    This is a best-effort, fail-fast check on the tree's modification
    counter, not a synchronization primitive.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Map structurally modified during iteration: "
            f"expected mod_count {expected}, found {actual}"
        )


class EmptyMapError(TreeMapError, LookupError):
    """Raised when an element is required but the map (or view) is empty."""


class IllegalCursorStateError(TreeMapError, RuntimeError):
    """Raised on cursor remove() when no element is pending removal."""


class InvariantViolationError(TreeMapError, AssertionError):
    """Raised by the invariant checker when a red-black property is broken."""


class SerializationError(TreeMapError, ValueError):
    """Raised when a persisted map cannot be written or read."""


class MapCorruptionError(SerializationError):
    """
    Raised when persisted map bytes are malformed or fail the checksum.

    This is a fail-fast error indicating data integrity issues.
    """

    def __init__(
        self,
        message: str,
        offset: int,
        expected: int | None = None,
        actual: int | None = None,
    ):
        """
        Initialize corruption error.

        Args:
            message: What was wrong with the data.
            offset: Byte offset where corruption was detected.
            expected: Expected CRC32 checksum, for checksum mismatches.
            actual: Actual CRC32 checksum computed.
        """
        self.offset = offset
        self.expected = expected
        self.actual = actual
        if expected is not None and actual is not None:
            message = (
                f"{message}: expected CRC32 0x{expected:08x}, got 0x{actual:08x}"
            )
        super().__init__(f"Map corruption detected at offset {offset}: {message}")
