"""Splitting of encoded messages and file contents for the BLE link."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class WriteSegment:
    """One file segment, wrapped in its own encoded WriteRequest.

    Attributes:
        file_byte_count: Bytes *from the file* in this segment, used for
            progress reporting only
        packets: Transport chunks of the encoded WriteRequest, sent in order
        has_next: More segments follow for the same file
    """

    file_byte_count: int
    packets: tuple[bytes, ...]
    has_next: bool


def split(data: bytes, unit_size: int) -> list[bytes]:
    """Split bytes into transport-sized chunks.

    Chunk boundaries ignore message structure; the receiver reassembles
    using the length prefix of the message.

    Args:
        data: Encoded message
        unit_size: Maximum bytes per chunk

    Returns:
        Chunks in order; a single chunk if data fits (also for empty data)

    Raises:
        ValueError: If unit_size is not positive
    """
    if unit_size <= 0:
        raise ValueError(f"unit_size must be positive, got {unit_size}")

    if len(data) <= unit_size:
        return [bytes(data)]

    return [bytes(data[i:i + unit_size]) for i in range(0, len(data), unit_size)]


def split_file(data: bytes, segment_size: int) -> list[bytes]:
    """Split file contents into WriteRequest-sized segments.

    An empty file still yields one (empty) segment so that the device
    receives a WriteRequest and creates the file.

    Raises:
        ValueError: If segment_size is not positive
    """
    if segment_size <= 0:
        raise ValueError(f"segment_size must be positive, got {segment_size}")

    if not data:
        return [b""]

    return [bytes(data[i:i + segment_size]) for i in range(0, len(data), segment_size)]
