"""Flipper BLE RPC Package.

  Pure Python client for the Flipper Zero RPC service over Bluetooth LE.
  """

from .config import LinkConfig
from .device import FlipperDevice, ProgressCallback
from .discovery import discover_devices, find_device_by_name
from .exceptions import (
    AppCantStartError,
    BLEConnectionError,
    BLETimeoutError,
    CommandFailedError,
    DecodeError,
    DeviceBusyError,
    DeviceDecodeError,
    FlipperError,
    IncompleteMessageError,
    InvalidParametersError,
    InvalidPathError,
    InvalidResponseError,
    MalformedMessageError,
    ProtocolError,
    UnexpectedResponseError,
)
from .models import CommandStatus, DirectoryListing, FileEntry, FileType
from .protocol import (
    FLOW_CONTROL_CHAR_UUID,
    RX_CHAR_UUID,
    SERIAL_SERVICE_UUID,
    TX_CHAR_UUID,
    LogicalMessage,
    MessageAssembler,
    ProtobufCodec,
)
from .transport import FixedDelayPacing, NoDelayPacing, PacingPolicy

__version__ = "0.1.0"

__all__ = [
    # Main API
    "FlipperDevice",
    "LinkConfig",
    "ProgressCallback",
    "discover_devices",
    "find_device_by_name",
    # Pacing
    "PacingPolicy",
    "FixedDelayPacing",
    "NoDelayPacing",
    # Exceptions
    "FlipperError",
    "BLEConnectionError",
    "BLETimeoutError",
    "ProtocolError",
    "DecodeError",
    "IncompleteMessageError",
    "MalformedMessageError",
    "InvalidResponseError",
    "CommandFailedError",
    "InvalidParametersError",
    "InvalidPathError",
    "AppCantStartError",
    "DeviceBusyError",
    "DeviceDecodeError",
    "UnexpectedResponseError",
    # Models
    "CommandStatus",
    "FileType",
    "FileEntry",
    "DirectoryListing",
    # Protocol
    "LogicalMessage",
    "MessageAssembler",
    "ProtobufCodec",
    # Constants
    "SERIAL_SERVICE_UUID",
    "RX_CHAR_UUID",
    "TX_CHAR_UUID",
    "FLOW_CONTROL_CHAR_UUID",
]
