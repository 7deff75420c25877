import io

import pytest

from ropepull.chunks import ChunkError, read_chunk, write_chunk


def _roundtrip(magic, items, fmt):
    buf = io.BytesIO()
    write_chunk(buf, magic, items, fmt)
    buf.seek(0)
    return read_chunk(buf, magic, fmt), buf


def test_wire_layout_of_single_record():
    buf = io.BytesIO()
    write_chunk(buf, "abcd", [(1,)], "<I")
    assert buf.getvalue() == b"abcd\x04\x00\x00\x00\x01\x00\x00\x00"


def test_roundtrip_records():
    items = [(0, 1, 5, 0.5, 1.0, 2.0), (7, 3, 9, -1.0, 0.25, 4.0)]
    result, buf = _roundtrip("xfh0", items, "<3I3f")
    assert result == items
    assert buf.read() == b""


def test_roundtrip_raw_bytes():
    result, _ = _roundtrip(b"str0", b"LeftSideBoundRightSideBound", None)
    assert result == b"LeftSideBoundRightSideBound"


def test_empty_chunk_roundtrip():
    result, buf = _roundtrip("msh0", [], "<3I")
    assert result == []
    assert len(buf.getvalue()) == 8


def test_sequential_chunks():
    buf = io.BytesIO()
    write_chunk(buf, "str0", b"name", None)
    write_chunk(buf, "msh0", [(0, 0, 4)], "<3I")
    buf.seek(0)
    assert read_chunk(buf, "str0", None) == b"name"
    assert read_chunk(buf, "msh0", "<3I") == [(0, 0, 4)]


def test_short_header_raises():
    with pytest.raises(ChunkError, match="header"):
        read_chunk(io.BytesIO(b"abc"), "abcd", "<I")


def test_wrong_magic_raises():
    buf = io.BytesIO()
    write_chunk(buf, "cam0", [(1,)], "<I")
    buf.seek(0)
    with pytest.raises(ChunkError, match="magic"):
        read_chunk(buf, "lmp0", "<I")


def test_size_not_divisible_raises():
    buf = io.BytesIO()
    write_chunk(buf, "abcd", b"\x00" * 6, None)
    buf.seek(0)
    with pytest.raises(ChunkError, match="divisible"):
        read_chunk(buf, "abcd", "<I")


def test_truncated_payload_raises():
    buf = io.BytesIO()
    write_chunk(buf, "abcd", [(1,), (2,)], "<I")
    truncated = io.BytesIO(buf.getvalue()[:-2])
    with pytest.raises(ChunkError, match="data"):
        read_chunk(truncated, "abcd", "<I")


def test_chunk_error_is_value_error():
    with pytest.raises(ValueError):
        read_chunk(io.BytesIO(b""), "abcd", None)


@pytest.mark.parametrize("magic", ["abc", "abcde", b""])
def test_write_rejects_bad_magic_length(magic):
    with pytest.raises(ValueError):
        write_chunk(io.BytesIO(), magic, b"", None)