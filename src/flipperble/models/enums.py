from __future__ import annotations

from enum import IntEnum
from typing import Final


class CommandStatus(IntEnum):
    """Command status codes reported by the Flipper RPC service."""
    OK = 0

    # Common errors
    ERROR = 1
    ERROR_DECODE = 2
    ERROR_NOT_IMPLEMENTED = 3
    ERROR_BUSY = 4
    ERROR_CONTINUOUS_COMMAND_INTERRUPTED = 14
    ERROR_INVALID_PARAMETERS = 15

    # Storage errors
    ERROR_STORAGE_NOT_READY = 5
    ERROR_STORAGE_EXIST = 6
    ERROR_STORAGE_NOT_EXIST = 7
    ERROR_STORAGE_INVALID_PARAMETER = 8
    ERROR_STORAGE_DENIED = 9
    ERROR_STORAGE_INVALID_NAME = 10
    ERROR_STORAGE_INTERNAL = 11
    ERROR_STORAGE_NOT_IMPLEMENTED = 12
    ERROR_STORAGE_ALREADY_OPEN = 13
    ERROR_STORAGE_DIR_NOT_EMPTY = 18

    # Application errors
    ERROR_APP_CANT_START = 16
    ERROR_APP_SYSTEM_LOCKED = 17


class FileType(IntEnum):
    """Storage entry type."""
    FILE = 0
    DIR = 1


STATUS_DESCRIPTIONS: Final[dict[CommandStatus, str]] = {
    CommandStatus.OK: "OK",
    CommandStatus.ERROR: "unknown error",
    CommandStatus.ERROR_DECODE: "device could not decode the request",
    CommandStatus.ERROR_NOT_IMPLEMENTED: "command not implemented",
    CommandStatus.ERROR_BUSY: "device is busy",
    CommandStatus.ERROR_CONTINUOUS_COMMAND_INTERRUPTED: "continuous command interrupted",
    CommandStatus.ERROR_INVALID_PARAMETERS: "invalid parameters",
    CommandStatus.ERROR_STORAGE_NOT_READY: "storage not ready",
    CommandStatus.ERROR_STORAGE_EXIST: "file or directory already exists",
    CommandStatus.ERROR_STORAGE_NOT_EXIST: "file or directory does not exist",
    CommandStatus.ERROR_STORAGE_INVALID_PARAMETER: "invalid storage parameter",
    CommandStatus.ERROR_STORAGE_DENIED: "access denied",
    CommandStatus.ERROR_STORAGE_INVALID_NAME: "invalid file name",
    CommandStatus.ERROR_STORAGE_INTERNAL: "internal storage error",
    CommandStatus.ERROR_STORAGE_NOT_IMPLEMENTED: "storage function not implemented",
    CommandStatus.ERROR_STORAGE_ALREADY_OPEN: "file already open",
    CommandStatus.ERROR_STORAGE_DIR_NOT_EMPTY: "directory not empty",
    CommandStatus.ERROR_APP_CANT_START: "application can't start",
    CommandStatus.ERROR_APP_SYSTEM_LOCKED: "application system locked",
}


def status_from_value(value: int) -> CommandStatus | int:
    """Map a raw status to CommandStatus, keeping unknown codes as plain ints."""
    try:
        return CommandStatus(value)
    except ValueError:
        return value


def file_type_from_value(value: int) -> FileType | int:
    """Map a raw file type to FileType, keeping unknown codes as plain ints."""
    try:
        return FileType(value)
    except ValueError:
        return value


def describe_status(status: CommandStatus | int) -> str:
    """Get a human-readable description of a command status."""
    try:
        return STATUS_DESCRIPTIONS[CommandStatus(status)]
    except (ValueError, KeyError):
        return f"unknown status {int(status)}"
