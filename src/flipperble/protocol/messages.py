"""Flipper RPC message models.

Each content type mirrors one message of the Flipper protobuf schema
(flipper.proto, storage.proto, application.proto, system.proto) and knows
its own field layout. ``Main`` in the schema is ``LogicalMessage`` here.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import ClassVar, Final, Union

from ..models.enums import CommandStatus, FileType, file_type_from_value, status_from_value
from .wire import (
    UINT32_MAX,
    WireType,
    decode_string,
    expect_wire_type,
    iter_fields,
    write_bool,
    write_bytes,
    write_message,
    write_string,
    write_uint,
)


def _parse_path_only(body: bytes) -> str:
    """Parse a message whose only field is ``string path = 1``."""
    path = ""
    for number, wire_type, value in iter_fields(body):
        if number == 1:
            expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
            path = decode_string(number, value)
    return path


def _parse_no_fields(body: bytes) -> None:
    """Validate a message body that has no fields of its own."""
    for _ in iter_fields(body):
        pass


@dataclass(frozen=True, slots=True)
class StorageFile:
    """PB_Storage.File: one storage entry, optionally carrying data."""

    type: FileType | int = FileType.FILE
    name: str = ""
    size: int = 0
    data: bytes = b""

    @property
    def is_dir(self) -> bool:
        return self.type == FileType.DIR

    def to_bytes(self) -> bytes:
        return (
            write_uint(1, int(self.type))
            + write_string(2, self.name)
            + write_uint(3, self.size)
            + write_bytes(4, self.data)
        )

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageFile:
        file_type: FileType | int = FileType.FILE
        name = ""
        size = 0
        data = b""
        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.VARINT)
                file_type = file_type_from_value(value)
            elif number == 2:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                name = decode_string(number, value)
            elif number == 3:
                expect_wire_type(number, wire_type, WireType.VARINT)
                size = value & UINT32_MAX
            elif number == 4:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                data = bytes(value)
        return cls(type=file_type, name=name, size=size, data=data)


@dataclass(frozen=True, slots=True)
class DateTime:
    """PB_System.DateTime.

    Weekday follows the device RTC driver: Monday is 1, Sunday is 7.
    """

    hour: int = 0
    minute: int = 0
    second: int = 0
    day: int = 0
    month: int = 0
    year: int = 0
    weekday: int = 0

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> DateTime:
        return cls(
            hour=value.hour,
            minute=value.minute,
            second=value.second,
            day=value.day,
            month=value.month,
            year=value.year,
            weekday=value.isoweekday(),
        )

    def to_datetime(self) -> dt.datetime:
        """Convert to a naive datetime in device-local time.

        Raises:
            ValueError: If the device reported an impossible date
        """
        return dt.datetime(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )

    def to_bytes(self) -> bytes:
        return (
            write_uint(1, self.hour)
            + write_uint(2, self.minute)
            + write_uint(3, self.second)
            + write_uint(4, self.day)
            + write_uint(5, self.month)
            + write_uint(6, self.year)
            + write_uint(7, self.weekday)
        )

    @classmethod
    def from_bytes(cls, body: bytes) -> DateTime:
        values = [0] * 7
        for number, wire_type, value in iter_fields(body):
            if 1 <= number <= 7:
                expect_wire_type(number, wire_type, WireType.VARINT)
                values[number - 1] = value & UINT32_MAX
        return cls(*values)


def _parse_optional_message(body: bytes, parser, field_number: int = 1):
    """Parse a message holding one optional embedded message at field_number."""
    result = None
    for number, wire_type, value in iter_fields(body):
        if number == field_number:
            expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
            result = parser(value)
    return result


# ---------------------------------------------------------------- content


@dataclass(frozen=True, slots=True)
class Empty:
    """PB.Empty. The device answers with it when a storage path is bad."""

    FIELD_NUMBER: ClassVar[int] = 4

    def to_bytes(self) -> bytes:
        return b""

    @classmethod
    def from_bytes(cls, body: bytes) -> Empty:
        _parse_no_fields(body)
        return cls()


@dataclass(frozen=True, slots=True)
class StorageListRequest:
    FIELD_NUMBER: ClassVar[int] = 7

    path: str = ""

    def to_bytes(self) -> bytes:
        return write_string(1, self.path)

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageListRequest:
        return cls(path=_parse_path_only(body))


@dataclass(frozen=True, slots=True)
class StorageListResponse:
    FIELD_NUMBER: ClassVar[int] = 8

    files: tuple[StorageFile, ...] = ()

    def to_bytes(self) -> bytes:
        return b"".join(write_message(1, f.to_bytes()) for f in self.files)

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageListResponse:
        files = []
        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                files.append(StorageFile.from_bytes(value))
        return cls(files=tuple(files))


@dataclass(frozen=True, slots=True)
class StorageReadRequest:
    FIELD_NUMBER: ClassVar[int] = 9

    path: str = ""

    def to_bytes(self) -> bytes:
        return write_string(1, self.path)

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageReadRequest:
        return cls(path=_parse_path_only(body))


@dataclass(frozen=True, slots=True)
class StorageReadResponse:
    FIELD_NUMBER: ClassVar[int] = 10

    file: StorageFile | None = None

    def to_bytes(self) -> bytes:
        if self.file is None:
            return b""
        return write_message(1, self.file.to_bytes())

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageReadResponse:
        return cls(file=_parse_optional_message(body, StorageFile.from_bytes))


@dataclass(frozen=True, slots=True)
class StorageWriteRequest:
    """One file segment. ``file`` is left unset for a zero-length file."""

    FIELD_NUMBER: ClassVar[int] = 11

    path: str = ""
    file: StorageFile | None = None

    def to_bytes(self) -> bytes:
        body = write_string(1, self.path)
        if self.file is not None:
            body += write_message(2, self.file.to_bytes())
        return body

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageWriteRequest:
        path = ""
        file = None
        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                path = decode_string(number, value)
            elif number == 2:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                file = StorageFile.from_bytes(value)
        return cls(path=path, file=file)


@dataclass(frozen=True, slots=True)
class StorageDeleteRequest:
    FIELD_NUMBER: ClassVar[int] = 12

    path: str = ""
    recursive: bool = False

    def to_bytes(self) -> bytes:
        return write_string(1, self.path) + write_bool(2, self.recursive)

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageDeleteRequest:
        path = ""
        recursive = False
        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                path = decode_string(number, value)
            elif number == 2:
                expect_wire_type(number, wire_type, WireType.VARINT)
                recursive = bool(value)
        return cls(path=path, recursive=recursive)


@dataclass(frozen=True, slots=True)
class AppStartRequest:
    """PB_App.StartRequest.

    ``name`` is a full path to a .fap file or the name of a built-in app.
    """

    FIELD_NUMBER: ClassVar[int] = 16

    name: str = ""
    args: str = ""

    def to_bytes(self) -> bytes:
        return write_string(1, self.name) + write_string(2, self.args)

    @classmethod
    def from_bytes(cls, body: bytes) -> AppStartRequest:
        name = ""
        args = ""
        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                name = decode_string(number, value)
            elif number == 2:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                args = decode_string(number, value)
        return cls(name=name, args=args)


@dataclass(frozen=True, slots=True)
class StorageStatRequest:
    FIELD_NUMBER: ClassVar[int] = 24

    path: str = ""

    def to_bytes(self) -> bytes:
        return write_string(1, self.path)

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageStatRequest:
        return cls(path=_parse_path_only(body))


@dataclass(frozen=True, slots=True)
class StorageStatResponse:
    FIELD_NUMBER: ClassVar[int] = 25

    file: StorageFile | None = None

    def to_bytes(self) -> bytes:
        if self.file is None:
            return b""
        return write_message(1, self.file.to_bytes())

    @classmethod
    def from_bytes(cls, body: bytes) -> StorageStatResponse:
        return cls(file=_parse_optional_message(body, StorageFile.from_bytes))


@dataclass(frozen=True, slots=True)
class SystemGetDateTimeRequest:
    FIELD_NUMBER: ClassVar[int] = 35

    def to_bytes(self) -> bytes:
        return b""

    @classmethod
    def from_bytes(cls, body: bytes) -> SystemGetDateTimeRequest:
        _parse_no_fields(body)
        return cls()


@dataclass(frozen=True, slots=True)
class SystemGetDateTimeResponse:
    FIELD_NUMBER: ClassVar[int] = 36

    datetime: DateTime | None = None

    def to_bytes(self) -> bytes:
        if self.datetime is None:
            return b""
        return write_message(1, self.datetime.to_bytes())

    @classmethod
    def from_bytes(cls, body: bytes) -> SystemGetDateTimeResponse:
        return cls(datetime=_parse_optional_message(body, DateTime.from_bytes))


@dataclass(frozen=True, slots=True)
class SystemSetDateTimeRequest:
    FIELD_NUMBER: ClassVar[int] = 37

    datetime: DateTime | None = None

    def to_bytes(self) -> bytes:
        if self.datetime is None:
            return b""
        return write_message(1, self.datetime.to_bytes())

    @classmethod
    def from_bytes(cls, body: bytes) -> SystemSetDateTimeRequest:
        return cls(datetime=_parse_optional_message(body, DateTime.from_bytes))


@dataclass(frozen=True, slots=True)
class SystemPlayAudiovisualAlertRequest:
    FIELD_NUMBER: ClassVar[int] = 38

    def to_bytes(self) -> bytes:
        return b""

    @classmethod
    def from_bytes(cls, body: bytes) -> SystemPlayAudiovisualAlertRequest:
        _parse_no_fields(body)
        return cls()


Content = Union[
    Empty,
    StorageListRequest,
    StorageListResponse,
    StorageReadRequest,
    StorageReadResponse,
    StorageWriteRequest,
    StorageDeleteRequest,
    AppStartRequest,
    StorageStatRequest,
    StorageStatResponse,
    SystemGetDateTimeRequest,
    SystemGetDateTimeResponse,
    SystemSetDateTimeRequest,
    SystemPlayAudiovisualAlertRequest,
]

CONTENT_TYPES: Final[dict[int, type[Content]]] = {
    cls.FIELD_NUMBER: cls
    for cls in (
        Empty,
        StorageListRequest,
        StorageListResponse,
        StorageReadRequest,
        StorageReadResponse,
        StorageWriteRequest,
        StorageDeleteRequest,
        AppStartRequest,
        StorageStatRequest,
        StorageStatResponse,
        SystemGetDateTimeRequest,
        SystemGetDateTimeResponse,
        SystemSetDateTimeRequest,
        SystemPlayAudiovisualAlertRequest,
    )
}


@dataclass(frozen=True, slots=True)
class LogicalMessage:
    """PB.Main: one RPC unit exchanged with the device.

    Attributes:
        command_id: Command identifier shared by every message of one
            logical command (uint32)
        command_status: CommandStatus, or the raw int for unknown codes
        has_next: More messages follow in the same request/response stream
        content: The oneof payload, None if absent or of an unknown kind
    """

    command_id: int = 0
    command_status: CommandStatus | int = CommandStatus.OK
    has_next: bool = False
    content: Content | None = field(default=None)

    def __post_init__(self) -> None:
        if not 0 <= self.command_id <= UINT32_MAX:
            raise ValueError(
                f"command_id out of range: {self.command_id} (must fit in uint32)"
            )

    def to_bytes(self) -> bytes:
        """Serialize the message body (without the length prefix)."""
        body = (
            write_uint(1, self.command_id)
            + write_uint(2, int(self.command_status))
            + write_bool(3, self.has_next)
        )
        if self.content is not None:
            body += write_message(self.content.FIELD_NUMBER, self.content.to_bytes())
        return body

    @classmethod
    def from_bytes(cls, body: bytes) -> LogicalMessage:
        """Parse a message body (without the length prefix).

        Raises:
            MalformedMessageError: If the body violates the schema
        """
        command_id = 0
        status: CommandStatus | int = CommandStatus.OK
        has_next = False
        content: Content | None = None

        for number, wire_type, value in iter_fields(body):
            if number == 1:
                expect_wire_type(number, wire_type, WireType.VARINT)
                command_id = value & UINT32_MAX
            elif number == 2:
                expect_wire_type(number, wire_type, WireType.VARINT)
                status = status_from_value(value)
            elif number == 3:
                expect_wire_type(number, wire_type, WireType.VARINT)
                has_next = bool(value)
            elif number in CONTENT_TYPES:
                expect_wire_type(number, wire_type, WireType.LENGTH_DELIMITED)
                # oneof: the last member on the wire wins
                content = CONTENT_TYPES[number].from_bytes(value)

        return cls(
            command_id=command_id,
            command_status=status,
            has_next=has_next,
            content=content,
        )


__all__ = [
    "AppStartRequest",
    "CONTENT_TYPES",
    "Content",
    "DateTime",
    "Empty",
    "LogicalMessage",
    "StorageDeleteRequest",
    "StorageFile",
    "StorageListRequest",
    "StorageListResponse",
    "StorageReadRequest",
    "StorageReadResponse",
    "StorageStatRequest",
    "StorageStatResponse",
    "StorageWriteRequest",
    "SystemGetDateTimeRequest",
    "SystemGetDateTimeResponse",
    "SystemPlayAudiovisualAlertRequest",
    "SystemSetDateTimeRequest",
]
