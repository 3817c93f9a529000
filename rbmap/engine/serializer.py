"""
MapSerializer - Persisted form of a sorted map.

Layout (big-endian):

    [magic "RBMP":4][version:1]
    [descriptor_len:4][comparator descriptor, utf-8]
    [count:8]
    count x ([key_len:4][key][value_len:4][value])    ascending key order
    [crc32:4]                                         over all preceding bytes

Pairs are written in key order so loading is a single linear bulk build.
"""

import io
import json
import logging
import os
import zlib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from rbmap.interfaces.navigable_map import NavigableMap
from rbmap.models.comparator import Comparator
from rbmap.models.exceptions import (
    InvalidKeyError,
    MapCorruptionError,
    SerializationError,
)
from rbmap.models.sortedcontainers.tree_map import TreeMap

logger = logging.getLogger(__name__)


class Codec(Protocol):
    """Turns keys and values into bytes and back."""

    def encode(self, obj: Any) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...


class JsonCodec:
    """
    Default codec: compact JSON, UTF-8.

    JSON has no tuples, so tuple keys come back as lists.
    """

    def encode(self, obj: Any) -> bytes:
        try:
            return json.dumps(obj, separators=(",", ":")).encode("utf-8")
        except TypeError as e:
            raise SerializationError(f"Cannot encode {obj!r}: {e}") from e

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class _ChecksumWriter:
    """Writes through to a binary stream, tracking CRC32 and length."""

    def __init__(self, fp: BinaryIO) -> None:
        self._fp = fp
        self.crc = 0
        self.written = 0

    def write(self, data: bytes) -> None:
        self._fp.write(data)
        self.crc = zlib.crc32(data, self.crc)
        self.written += len(data)

    def write_field(self, data: bytes) -> None:
        self.write(len(data).to_bytes(4, "big") + data)


class _ChecksumReader:
    """Reads exact byte counts from a binary stream, tracking CRC32 and offset."""

    def __init__(self, fp: BinaryIO) -> None:
        self._fp = fp
        self.crc = 0
        self.offset = 0

    def read(self, size: int, checksum: bool = True) -> bytes:
        data = self._fp.read(size)
        if len(data) < size:
            raise MapCorruptionError(
                f"truncated data: wanted {size} bytes, got {len(data)}", self.offset
            )
        if checksum:
            self.crc = zlib.crc32(data, self.crc)
        self.offset += size
        return data

    def read_int(self, size: int) -> int:
        return int.from_bytes(self.read(size), "big")

    def read_field(self) -> bytes:
        return self.read(self.read_int(4))


class MapSerializer:
    """
    Writes and reads the persisted form of a sorted map.

    Handles:
    - Comparator descriptors (built-in names or caller-supplied comparators)
    - Length-prefixed key/value framing through a pluggable codec
    - CRC32 integrity check over the whole stream
    - Linear-time reload through the bulk builder
    """

    MAGIC = b"RBMP"
    FORMAT_VERSION = 1

    def __init__(
        self,
        codec: Codec | None = None,
        comparators: Mapping[str, Comparator] | None = None,
    ) -> None:
        """
        Initialize serializer.

        Args:
            codec: Key/value codec. Defaults to JsonCodec.
            comparators: Custom comparators by descriptor name, used on load.
        """
        self._codec = codec or JsonCodec()
        self._comparators = dict(comparators or {})

    def dump(self, tree: NavigableMap, fp: BinaryIO) -> int:
        """
        Write ``tree`` to a binary stream.

        Args:
            tree: A TreeMap or RangeView; entries are written in its order.
            fp: Writable binary stream.

        Returns:
            Number of bytes written.
        """
        writer = _ChecksumWriter(fp)
        descriptor = tree.comparator.name
        count = tree.size()

        writer.write(self.MAGIC + self.FORMAT_VERSION.to_bytes(1, "big"))
        writer.write_field(descriptor.encode("utf-8"))
        writer.write(count.to_bytes(8, "big"))

        written = 0
        for key, value in tree.entry_cursor():
            writer.write_field(self._codec.encode(key))
            writer.write_field(self._codec.encode(value))
            written += 1
        if written != count:
            raise SerializationError(
                f"Map changed size while dumping: expected {count}, wrote {written}"
            )

        fp.write((writer.crc & 0xFFFFFFFF).to_bytes(4, "big"))
        total = writer.written + 4
        logger.debug(
            f"Dumped {count} entries ({total} bytes, comparator {descriptor!r})"
        )
        return total

    def dumps(self, tree: NavigableMap) -> bytes:
        buffer = io.BytesIO()
        self.dump(tree, buffer)
        return buffer.getvalue()

    def load(self, fp: BinaryIO) -> TreeMap:
        """
        Read a map from a binary stream.

        Raises:
            MapCorruptionError: Bad header, truncation, out-of-order keys or
                checksum mismatch.
            SerializationError: The comparator descriptor is unknown.
        """
        reader = _ChecksumReader(fp)

        magic = reader.read(len(self.MAGIC))
        if magic != self.MAGIC:
            raise MapCorruptionError(f"bad magic {magic!r}", 0)
        version = reader.read_int(1)
        if version != self.FORMAT_VERSION:
            raise MapCorruptionError(
                f"unsupported format version {version}", reader.offset - 1
            )

        try:
            descriptor = reader.read_field().decode("utf-8")
        except UnicodeDecodeError as e:
            raise MapCorruptionError("descriptor is not utf-8", reader.offset) from e
        comparator = self.resolve_comparator(descriptor)
        count = reader.read_int(8)

        tree = TreeMap(comparator=comparator)
        try:
            tree._build_from_sorted(count, self._read_pairs(reader, count), True)
        except MapCorruptionError:
            raise
        except (ValueError, InvalidKeyError) as e:
            raise MapCorruptionError(str(e), reader.offset) from e

        actual = reader.crc & 0xFFFFFFFF
        expected = int.from_bytes(reader.read(4, checksum=False), "big")
        if expected != actual:
            raise MapCorruptionError(
                "checksum mismatch", reader.offset - 4, expected, actual
            )

        logger.debug(f"Loaded {count} entries (comparator {descriptor!r})")
        return tree

    def loads(self, data: bytes) -> TreeMap:
        return self.load(io.BytesIO(data))

    def resolve_comparator(self, descriptor: str) -> Comparator:
        """
        Map a persisted descriptor back to a Comparator.

        Raises:
            SerializationError: No comparator is known under that name.
        """
        if descriptor in self._comparators:
            return self._comparators[descriptor]
        if descriptor == Comparator.NATURAL:
            return Comparator.natural()
        if descriptor == Comparator.REVERSE:
            return Comparator.reverse_natural()
        if descriptor.startswith("reversed:"):
            return self.resolve_comparator(descriptor[len("reversed:"):]).reversed()
        raise SerializationError(
            f"Unknown comparator descriptor {descriptor!r}; "
            f"pass it in comparators= to load this map"
        )

    def _read_pairs(
        self, reader: _ChecksumReader, count: int
    ) -> Iterator[tuple[Any, Any]]:
        for _ in range(count):
            key = self._codec.decode(reader.read_field())
            value = self._codec.decode(reader.read_field())
            yield key, value


def dump(tree: NavigableMap, fp: BinaryIO, codec: Codec | None = None) -> int:
    return MapSerializer(codec).dump(tree, fp)


def dumps(tree: NavigableMap, codec: Codec | None = None) -> bytes:
    return MapSerializer(codec).dumps(tree)


def load(
    fp: BinaryIO,
    comparators: Mapping[str, Comparator] | None = None,
    codec: Codec | None = None,
) -> TreeMap:
    return MapSerializer(codec, comparators).load(fp)


def loads(
    data: bytes,
    comparators: Mapping[str, Comparator] | None = None,
    codec: Codec | None = None,
) -> TreeMap:
    return MapSerializer(codec, comparators).loads(data)


def save(tree: NavigableMap, path: str, codec: Codec | None = None) -> int:
    """
    Write ``tree`` to ``path`` atomically.

    The map is written to a sibling temp file, fsynced, then renamed over
    ``path`` so readers never observe a partial file.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "wb") as f:
            written = dump(tree, f, codec)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.info(f"Saved map with {tree.size()} entries to {path}")
    return written


def open_map(
    path: str,
    comparators: Mapping[str, Comparator] | None = None,
    codec: Codec | None = None,
) -> TreeMap:
    """Load a map previously written with ``save``."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Map file not found: {path}")
    with open(path, "rb") as f:
        return load(f, comparators, codec)
