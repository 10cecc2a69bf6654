"""Test splitting of messages and files."""

import pytest

from flipperble.protocol import FILE_SEGMENT_SIZE, TRANSPORT_UNIT_SIZE
from flipperble.protocol.chunking import split, split_file


@pytest.mark.parametrize("length", [0, 1, 349, 350, 351, 700, 701, 1500])
def test_split_rejoins(length: int) -> None:
    """Chunks concatenate back to the input and never exceed the unit size."""
    data = bytes(i & 0xFF for i in range(length))

    chunks = split(data, TRANSPORT_UNIT_SIZE)

    assert b"".join(chunks) == data
    assert all(len(c) <= TRANSPORT_UNIT_SIZE for c in chunks)


def test_split_small_message_single_chunk() -> None:
    assert split(b"\x03\xb2\x02\x00", TRANSPORT_UNIT_SIZE) == [b"\x03\xb2\x02\x00"]


def test_split_empty() -> None:
    assert split(b"", 20) == [b""]


def test_split_exact_multiple() -> None:
    chunks = split(b"a" * 40, 20)

    assert chunks == [b"a" * 20, b"a" * 20]


@pytest.mark.parametrize("size", [0, -1])
def test_split_invalid_unit_size(size: int) -> None:
    with pytest.raises(ValueError, match="unit_size"):
        split(b"abc", size)


def test_split_file_segments() -> None:
    """1023 bytes at 512 per segment."""
    data = b"z" * 1023

    segments = split_file(data, FILE_SEGMENT_SIZE)

    assert [len(s) for s in segments] == [512, 511]
    assert b"".join(segments) == data


def test_split_file_empty() -> None:
    """An empty file still needs one WriteRequest."""
    assert split_file(b"", FILE_SEGMENT_SIZE) == [b""]


def test_split_file_invalid_segment_size() -> None:
    with pytest.raises(ValueError, match="segment_size"):
        split_file(b"abc", 0)
