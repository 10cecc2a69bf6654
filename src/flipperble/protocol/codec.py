"""Encoding and decoding of length-delimited Flipper RPC messages."""

from __future__ import annotations

import datetime as dt
import logging

from ..exceptions import IncompleteMessageError, MalformedMessageError
from ..models.enums import CommandStatus
from .chunking import WriteSegment, split, split_file
from .commands import FILE_SEGMENT_SIZE, TRANSPORT_UNIT_SIZE
from .messages import (
    AppStartRequest,
    Content,
    DateTime,
    LogicalMessage,
    StorageDeleteRequest,
    StorageFile,
    StorageListRequest,
    StorageReadRequest,
    StorageStatRequest,
    StorageWriteRequest,
    SystemGetDateTimeRequest,
    SystemPlayAudiovisualAlertRequest,
    SystemSetDateTimeRequest,
)
from .wire import UINT32_MAX, decode_varint, encode_varint

_LOGGER = logging.getLogger(__name__)


def encode_message(message: LogicalMessage) -> bytes:
    """Encode a message as varint(body length) + body."""
    body = message.to_bytes()
    return encode_varint(len(body)) + body


def decode_message(data: bytes) -> tuple[LogicalMessage, int]:
    """Decode one length-delimited message from the start of data.

    Args:
        data: Accumulated bytes, starting with the length varint

    Returns:
        (message, bytes consumed); bytes past the declared length are
        left for the caller

    Raises:
        IncompleteMessageError: If the length varint or the body is not
            fully present yet
        MalformedMessageError: If the declared length or body is invalid
    """
    length, offset = decode_varint(data)
    if length > UINT32_MAX:
        raise MalformedMessageError(f"Declared message length too large: {length}")

    end = offset + length
    if len(data) < end:
        raise IncompleteMessageError(
            f"Have {len(data) - offset}/{length} body bytes"
        )

    return LogicalMessage.from_bytes(bytes(data[offset:end])), end


class ProtobufCodec:
    """Builds request messages and owns the command id counter.

    The command id is shared by every packet of one logical command and
    advances exactly once per logical command. Streaming commands (file
    writes) build all of their packets with the same id and advance once
    at the end.
    """

    def __init__(
            self,
            unit_size: int = TRANSPORT_UNIT_SIZE,
            segment_size: int = FILE_SEGMENT_SIZE,
    ):
        """Initialize codec.

        Args:
            unit_size: Maximum bytes per transport chunk (default: 350)
            segment_size: File bytes per WriteRequest (default: 512)
        """
        self.unit_size = unit_size
        self.segment_size = segment_size
        self._command_id = 0

    @property
    def command_id(self) -> int:
        """Command id the next request will carry."""
        return self._command_id

    def inc_command_id(self) -> None:
        """Advance the command id (wraps at uint32)."""
        self._command_id = (self._command_id + 1) & UINT32_MAX

    def new_request(
            self,
            content: Content | None,
            *,
            has_next: bool = False,
            increment: bool = True,
    ) -> LogicalMessage:
        """Build a message with the current command id and status OK.

        Args:
            content: Message payload
            has_next: More messages follow for the same command
            increment: Advance the command id after building
        """
        message = LogicalMessage(
            command_id=self._command_id,
            command_status=CommandStatus.OK,
            has_next=has_next,
            content=content,
        )
        if increment:
            self.inc_command_id()
        return message

    @staticmethod
    def encode(message: LogicalMessage) -> bytes:
        return encode_message(message)

    @staticmethod
    def decode(data: bytes) -> LogicalMessage:
        """Decode one message, ignoring bytes past its declared length."""
        message, _ = decode_message(data)
        return message

    def _packets(self, message: LogicalMessage) -> list[bytes]:
        encoded = encode_message(message)
        _LOGGER.debug("Encoded %s: %s", type(message.content).__name__, encoded.hex())
        return split(encoded, self.unit_size)

    def create_ok_response(self) -> list[bytes]:
        """Message with status OK and no content, sent to acknowledge a finished transfer."""
        return self._packets(self.new_request(None))

    def create_launch_request(self, path: str, args: str = "") -> list[bytes]:
        """Build an AppStartRequest.

        Args:
            path: Full path of a .fap file, or the name of a built-in app
            args: Arguments for the app, e.g. a file to open
        """
        return self._packets(self.new_request(AppStartRequest(name=path, args=args)))

    def create_list_request(self, path: str) -> list[bytes]:
        return self._packets(self.new_request(StorageListRequest(path=path)))

    def create_read_request(self, path: str) -> list[bytes]:
        return self._packets(self.new_request(StorageReadRequest(path=path)))

    def create_stat_request(self, path: str) -> list[bytes]:
        return self._packets(self.new_request(StorageStatRequest(path=path)))

    def create_delete_request(self, path: str, recursive: bool = False) -> list[bytes]:
        return self._packets(
            self.new_request(StorageDeleteRequest(path=path, recursive=recursive))
        )

    def create_alert_request(self) -> list[bytes]:
        return self._packets(self.new_request(SystemPlayAudiovisualAlertRequest()))

    def create_get_datetime_request(self) -> list[bytes]:
        return self._packets(self.new_request(SystemGetDateTimeRequest()))

    def create_set_datetime_request(self, value: dt.datetime) -> list[bytes]:
        """Build a SetDateTimeRequest from the wall-clock fields of value."""
        request = SystemSetDateTimeRequest(datetime=DateTime.from_datetime(value))
        return self._packets(self.new_request(request))

    def create_write_request_segments(
            self,
            file_data: bytes,
            dest_path: str,
    ) -> list[WriteSegment]:
        """Build one WriteRequest per file segment.

        Every segment carries the same command id; only the last one has
        has_next unset. The device answers once, after the last segment.

        Args:
            file_data: Complete file contents
            dest_path: Full destination path on the device, including file name

        Returns:
            Segments in send order
        """
        chunks = split_file(file_data, self.segment_size)
        segments = []

        for index, chunk in enumerate(chunks):
            has_next = index < len(chunks) - 1
            # An empty file is sent as a WriteRequest without a File
            file = StorageFile(data=chunk) if chunk else None
            message = self.new_request(
                StorageWriteRequest(path=dest_path, file=file),
                has_next=has_next,
                increment=False,
            )
            segments.append(WriteSegment(
                file_byte_count=len(chunk),
                packets=tuple(split(encode_message(message), self.unit_size)),
                has_next=has_next,
            ))

        _LOGGER.debug(
            "Built %d write segments for %d bytes (command id %d)",
            len(segments),
            len(file_data),
            self._command_id,
        )

        # One logical command, however many segments it took
        self.inc_command_id()
        return segments
