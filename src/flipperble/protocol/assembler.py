"""Reassembly of RPC messages from BLE notification fragments."""

from __future__ import annotations

import logging

from ..exceptions import IncompleteMessageError, MalformedMessageError
from .codec import decode_message
from .messages import LogicalMessage

_LOGGER = logging.getLogger(__name__)


class MessageAssembler:
    """Assembles length-delimited messages from notification fragments.

    The device sends each message as one or more notifications with no
    framing of their own; only the message length prefix tells where a
    message ends. A response may span several messages linked by has_next:

    - Fragment 1: [len varint][body part...]
    - Fragment N: [...body part]
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.messages_decoded = 0
        self.complete = False

    def feed(self, data: bytes) -> None:
        """Append one notification fragment to the buffer."""
        self._buffer.extend(data)
        _LOGGER.debug(
            "Buffered %d bytes (%d total)", len(data), len(self._buffer)
        )

    def try_decode(self) -> LogicalMessage | None:
        """Decode the next message if all of its bytes have arrived.

        Returns:
            The decoded message, or None if more fragments are needed

        Raises:
            MalformedMessageError: If the buffered bytes cannot be a valid
                message; the buffer is discarded
        """
        if not self._buffer:
            return None

        try:
            message, consumed = decode_message(self._buffer)
        except IncompleteMessageError as e:
            _LOGGER.debug("Incomplete message, waiting for more data: %s", e)
            return None
        except MalformedMessageError:
            _LOGGER.debug("Discarding %d malformed bytes", len(self._buffer))
            self._buffer.clear()
            raise

        del self._buffer[:consumed]
        self.messages_decoded += 1
        if not message.has_next:
            self.complete = True

        return message

    def clear(self) -> None:
        """Drop all buffered bytes."""
        self._buffer.clear()

    @property
    def buffered(self) -> int:
        """Number of bytes waiting for decode."""
        return len(self._buffer)

    @property
    def is_complete(self) -> bool:
        """Check if the terminal message (has_next unset) was decoded."""
        return self.complete
