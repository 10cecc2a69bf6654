"""Protobuf wire format primitives.

Only what the Flipper RPC schema needs: varints, length-delimited fields
and skipping of fixed-width fields the client does not know about.

Format reference:
- tag: varint of (field_number << 3) | wire_type
- wire type 0: varint
- wire type 1: 8 bytes little-endian
- wire type 2: varint length + payload
- wire type 5: 4 bytes little-endian
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import IntEnum

from ..exceptions import IncompleteMessageError, MalformedMessageError

MAX_VARINT_BYTES = 10
UINT32_MAX = 0xFFFFFFFF
UINT64_MAX = 0xFFFFFFFFFFFFFFFF


class WireType(IntEnum):
    """Protobuf wire types."""
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


def encode_varint(value: int) -> bytes:
    """Encode an unsigned integer as a base-128 varint.

    Args:
        value: Integer in range 0 to 2**64 - 1

    Returns:
        1-10 bytes, least significant group first

    Raises:
        ValueError: If value is negative or wider than 64 bits
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative varint: {value}")
    if value > UINT64_MAX:
        raise ValueError(f"Varint too large: {value}")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint starting at offset.

    Args:
        data: Buffer to read from
        offset: Position of the first varint byte

    Returns:
        (value, offset just past the varint)

    Raises:
        IncompleteMessageError: If the buffer ends inside the varint
        MalformedMessageError: If the varint is longer than 10 bytes
    """
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos - offset >= MAX_VARINT_BYTES:
            raise MalformedMessageError(f"Varint at offset {offset} exceeds {MAX_VARINT_BYTES} bytes")
        if pos >= len(data):
            raise IncompleteMessageError(
                f"Buffer ended inside varint at offset {offset}"
            )
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7


def _tag(field_number: int, wire_type: WireType) -> bytes:
    return encode_varint((field_number << 3) | wire_type)


def write_uint(field_number: int, value: int) -> bytes:
    """Encode a uint32/uint64/enum field, omitting the proto3 default (0)."""
    if not value:
        return b""
    return _tag(field_number, WireType.VARINT) + encode_varint(value)


def write_bool(field_number: int, value: bool) -> bytes:
    """Encode a bool field, omitting False."""
    return write_uint(field_number, 1 if value else 0)


def write_bytes(field_number: int, value: bytes) -> bytes:
    """Encode a bytes field, omitting empty values."""
    if not value:
        return b""
    return _tag(field_number, WireType.LENGTH_DELIMITED) + encode_varint(len(value)) + value


def write_string(field_number: int, value: str) -> bytes:
    """Encode a UTF-8 string field, omitting empty strings."""
    return write_bytes(field_number, value.encode("utf-8"))


def write_message(field_number: int, body: bytes) -> bytes:
    """Encode an embedded message field.

    Present sub-messages are always written, even with an empty body.
    """
    return _tag(field_number, WireType.LENGTH_DELIMITED) + encode_varint(len(body)) + body


def iter_fields(body: bytes) -> Iterator[tuple[int, WireType, int | bytes]]:
    """Iterate over the fields of one message body.

    The body length is already known to the caller, so running out of
    bytes here is a schema violation, not a reason to wait for more data.

    Yields:
        (field_number, wire_type, value); value is an int for varints and
        bytes for every other wire type

    Raises:
        MalformedMessageError: On truncation, groups, field number 0 or
            an unknown wire type
    """
    pos = 0
    end = len(body)
    while pos < end:
        try:
            key, pos = decode_varint(body, pos)
        except IncompleteMessageError as e:
            raise MalformedMessageError(f"Truncated field tag: {e}") from e

        field_number = key >> 3
        raw_wire_type = key & 0x07
        if field_number == 0:
            raise MalformedMessageError("Invalid field number 0")
        try:
            wire_type = WireType(raw_wire_type)
        except ValueError as e:
            raise MalformedMessageError(f"Unknown wire type {raw_wire_type}") from e

        value: int | bytes
        if wire_type == WireType.VARINT:
            try:
                value, pos = decode_varint(body, pos)
            except IncompleteMessageError as e:
                raise MalformedMessageError(
                    f"Truncated varint in field {field_number}"
                ) from e
        elif wire_type == WireType.LENGTH_DELIMITED:
            try:
                length, pos = decode_varint(body, pos)
            except IncompleteMessageError as e:
                raise MalformedMessageError(
                    f"Truncated length in field {field_number}"
                ) from e
            if pos + length > end:
                raise MalformedMessageError(
                    f"Field {field_number} declares {length} bytes, "
                    f"only {end - pos} remain"
                )
            value = body[pos:pos + length]
            pos += length
        elif wire_type in (WireType.FIXED64, WireType.FIXED32):
            width = 8 if wire_type == WireType.FIXED64 else 4
            if pos + width > end:
                raise MalformedMessageError(f"Truncated fixed-width field {field_number}")
            value = body[pos:pos + width]
            pos += width
        else:
            raise MalformedMessageError(f"Groups are not supported (field {field_number})")

        yield field_number, wire_type, value


def expect_wire_type(
        field_number: int,
        wire_type: WireType,
        expected: WireType,
) -> None:
    """Check that a known field arrived with the wire type the schema declares."""
    if wire_type != expected:
        raise MalformedMessageError(
            f"Field {field_number}: expected wire type {expected.name}, got {wire_type.name}"
        )


def decode_string(field_number: int, value: bytes) -> str:
    """Decode a string field, rejecting invalid UTF-8."""
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedMessageError(f"Field {field_number} is not valid UTF-8") from e
