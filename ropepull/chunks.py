"""Reading and writing of size-prefixed binary chunks.

A chunk is laid out as::

    |ma|gi|c.|..|   four byte magic
    |sz|sz|sz|sz|   payload size in bytes (little-endian uint32)
    |TT...TT| ...   payload: size / sizeof(T) packed records
"""

from __future__ import annotations

import struct
from typing import Any, BinaryIO, Iterable

_HEADER = struct.Struct("<4sI")


class ChunkError(ValueError):
    """Raised when a chunk cannot be read or does not have the expected shape."""


def _magic_bytes(magic: str | bytes) -> bytes:
    if isinstance(magic, str):
        return magic.encode("ascii")
    return bytes(magic)


def _record_struct(item_format: str | None) -> struct.Struct | None:
    if item_format is None:
        return None
    record = struct.Struct(item_format)
    if record.size == 0:
        raise ValueError(f"record format {item_format!r} has zero size")
    return record


def read_chunk(
    stream: BinaryIO, magic: str | bytes, item_format: str | None
) -> list[tuple[Any, ...]] | bytes:
    """Read one chunk from ``stream``.

    ``item_format`` is a :mod:`struct` format describing one record (give it an
    explicit byte order, e.g. ``"<3I"``); the records are returned as a list of
    tuples. With ``item_format`` of ``None`` the raw payload bytes are returned.
    """
    header = stream.read(_HEADER.size)
    if header is None or len(header) != _HEADER.size:
        raise ChunkError("Failed to read chunk header")
    found, size = _HEADER.unpack(header)
    if found != _magic_bytes(magic):
        raise ChunkError("Unexpected magic number in chunk")

    record = _record_struct(item_format)
    record_size = 1 if record is None else record.size
    if size % record_size != 0:
        raise ChunkError("Size of chunk not divisible by element size")

    payload = stream.read(size)
    if payload is None or len(payload) != size:
        raise ChunkError("Failed to read chunk data.")

    if record is None:
        return bytes(payload)
    return list(record.iter_unpack(payload))


def write_chunk(
    stream: BinaryIO,
    magic: str | bytes,
    items: Iterable[Iterable[Any]] | bytes,
    item_format: str | None,
) -> None:
    """Write ``items`` as one chunk in the format :func:`read_chunk` reads.

    With ``item_format`` of ``None``, ``items`` is a bytes-like payload.
    """
    tag = _magic_bytes(magic)
    if len(tag) != 4:
        raise ValueError(f"chunk magic must be exactly 4 bytes, got {tag!r}")

    record = _record_struct(item_format)
    if record is None:
        payload = bytes(items)  # type: ignore[arg-type]
    else:
        payload = b"".join(record.pack(*item) for item in items)  # type: ignore[union-attr]

    stream.write(_HEADER.pack(tag, len(payload)))
    stream.write(payload)