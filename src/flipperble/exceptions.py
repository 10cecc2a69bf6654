"""Exceptions raised by flipperble."""

from __future__ import annotations


class FlipperError(Exception):
    """Base exception for all flipperble errors."""


class BLEConnectionError(FlipperError):
    """BLE connection, write, read or subscribe failed."""


class BLETimeoutError(FlipperError):
    """No data arrived from the device in time."""


class ProtocolError(FlipperError):
    """RPC protocol violation or device-reported failure."""


class DecodeError(ProtocolError):
    """Bytes could not be decoded into an RPC message."""


class IncompleteMessageError(DecodeError):
    """Fewer bytes are available than the message declares.

    Not a failure while reassembling: wait for more fragments.
    """


class MalformedMessageError(DecodeError):
    """Bytes are inconsistent with the message schema."""


class InvalidResponseError(ProtocolError):
    """Device answered with an unexpected message content."""


class CommandFailedError(ProtocolError):
    """Device reported a non-OK command status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class InvalidParametersError(CommandFailedError):
    """Device rejected the command parameters."""


class InvalidPathError(CommandFailedError):
    """Path does not exist on the device or is not a valid name."""


class AppCantStartError(CommandFailedError):
    """Application could not be started."""


class DeviceBusyError(CommandFailedError):
    """Device is busy or its application system is locked."""


class DeviceDecodeError(CommandFailedError):
    """Device failed to decode the request.

    The device ends its RPC session after reporting this.
    """


class UnexpectedResponseError(CommandFailedError):
    """Device reported a status code this client does not know."""
