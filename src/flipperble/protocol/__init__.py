"""Flipper RPC protocol implementation."""

from .assembler import MessageAssembler
from .chunking import WriteSegment, split, split_file
from .codec import ProtobufCodec, decode_message, encode_message
from .commands import (
    DEFAULT_LIST_PATH,
    FILE_SEGMENT_SIZE,
    FLOW_CONTROL_CHAR_UUID,
    RX_CHAR_UUID,
    SERIAL_SERVICE_UUID,
    TRANSPORT_UNIT_SIZE,
    TX_CHAR_UUID,
    parse_flow_control_value,
)
from .messages import (
    CONTENT_TYPES,
    AppStartRequest,
    Content,
    DateTime,
    Empty,
    LogicalMessage,
    StorageDeleteRequest,
    StorageFile,
    StorageListRequest,
    StorageListResponse,
    StorageReadRequest,
    StorageReadResponse,
    StorageStatRequest,
    StorageStatResponse,
    StorageWriteRequest,
    SystemGetDateTimeRequest,
    SystemGetDateTimeResponse,
    SystemPlayAudiovisualAlertRequest,
    SystemSetDateTimeRequest,
)
from .responses import check_command_status, expect_content

__all__ = [
    "SERIAL_SERVICE_UUID",
    "RX_CHAR_UUID",
    "TX_CHAR_UUID",
    "FLOW_CONTROL_CHAR_UUID",
    "TRANSPORT_UNIT_SIZE",
    "FILE_SEGMENT_SIZE",
    "DEFAULT_LIST_PATH",
    "parse_flow_control_value",
    "ProtobufCodec",
    "encode_message",
    "decode_message",
    "split",
    "split_file",
    "WriteSegment",
    "MessageAssembler",
    "check_command_status",
    "expect_content",
    "CONTENT_TYPES",
    "Content",
    "LogicalMessage",
    "StorageFile",
    "DateTime",
    "Empty",
    "AppStartRequest",
    "StorageListRequest",
    "StorageListResponse",
    "StorageReadRequest",
    "StorageReadResponse",
    "StorageWriteRequest",
    "StorageDeleteRequest",
    "StorageStatRequest",
    "StorageStatResponse",
    "SystemGetDateTimeRequest",
    "SystemGetDateTimeResponse",
    "SystemSetDateTimeRequest",
    "SystemPlayAudiovisualAlertRequest",
]
