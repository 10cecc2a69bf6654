"""RPC response validation."""

from __future__ import annotations

from typing import TypeVar

from ..exceptions import (
    AppCantStartError,
    CommandFailedError,
    DeviceBusyError,
    DeviceDecodeError,
    InvalidParametersError,
    InvalidPathError,
    InvalidResponseError,
    UnexpectedResponseError,
)
from ..models.enums import CommandStatus, describe_status
from .messages import Empty, LogicalMessage

_ContentT = TypeVar("_ContentT")

_STATUS_ERRORS: dict[CommandStatus, type[CommandFailedError]] = {
    CommandStatus.ERROR_INVALID_PARAMETERS: InvalidParametersError,
    CommandStatus.ERROR_STORAGE_INVALID_PARAMETER: InvalidParametersError,
    CommandStatus.ERROR_STORAGE_NOT_EXIST: InvalidPathError,
    CommandStatus.ERROR_STORAGE_INVALID_NAME: InvalidPathError,
    CommandStatus.ERROR_APP_CANT_START: AppCantStartError,
    CommandStatus.ERROR_APP_SYSTEM_LOCKED: DeviceBusyError,
    CommandStatus.ERROR_BUSY: DeviceBusyError,
    CommandStatus.ERROR_DECODE: DeviceDecodeError,
}


def check_command_status(message: LogicalMessage) -> None:
    """Raise the matching error if the device reported a failure.

    Args:
        message: Decoded response

    Raises:
        CommandFailedError: Subclass matching the status; the status is
            kept on the exception
        UnexpectedResponseError: If the status code is not known
    """
    status = message.command_status
    if status == CommandStatus.OK:
        return

    if not isinstance(status, CommandStatus):
        raise UnexpectedResponseError(
            f"Device returned unexpected status {status} "
            f"(command id {message.command_id})",
            status=status,
        )

    error_class = _STATUS_ERRORS.get(status, CommandFailedError)
    raise error_class(
        f"Device returned {status.name}: {describe_status(status)}",
        status=status,
    )


def expect_content(
        message: LogicalMessage,
        expected: type[_ContentT],
        *,
        empty_means_invalid_path: bool = False,
) -> _ContentT:
    """Get the message content, checking it is of the expected kind.

    The device answers list/read/stat on a bad path with an Empty message
    and status OK instead of an error status.

    Args:
        message: Decoded response (status already checked)
        expected: Content class the command answers with
        empty_means_invalid_path: Map Empty content to InvalidPathError

    Raises:
        InvalidPathError: If content is Empty and empty_means_invalid_path
        InvalidResponseError: If content is of another kind
    """
    content = message.content
    if isinstance(content, expected):
        return content

    if empty_means_invalid_path and isinstance(content, Empty):
        raise InvalidPathError("Invalid Flipper path! Check that the path is correct.")

    raise InvalidResponseError(
        f"Expected {expected.__name__}, got {type(content).__name__}"
    )
