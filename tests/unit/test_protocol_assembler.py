"""Test reassembly of messages from notification fragments."""

import pytest

from flipperble.exceptions import MalformedMessageError
from flipperble.protocol import (
    LogicalMessage,
    MessageAssembler,
    StorageFile,
    StorageReadResponse,
    encode_message,
)


def _read_response(data: bytes, has_next: bool, command_id: int = 4) -> LogicalMessage:
    return LogicalMessage(
        command_id=command_id,
        has_next=has_next,
        content=StorageReadResponse(file=StorageFile(data=data)),
    )


def _fragments(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


class TestMessageAssembler:
    """Test MessageAssembler."""

    def test_decode_only_after_last_byte(self):
        """Test no message is produced before every byte has been fed."""
        message = _read_response(bytes(range(256)) * 2, has_next=False)
        encoded = encode_message(message)
        assembler = MessageAssembler()

        for byte in encoded[:-1]:
            assembler.feed(bytes([byte]))
            assert assembler.try_decode() is None

        assembler.feed(encoded[-1:])
        assert assembler.try_decode() == message
        assert assembler.buffered == 0
        assert assembler.is_complete

    def test_empty_buffer(self):
        """Test decoding nothing yields nothing."""
        assembler = MessageAssembler()

        assert assembler.try_decode() is None
        assert not assembler.is_complete

    @pytest.mark.parametrize("fragment_size", [1, 7, 20, 350])
    def test_stream_of_messages(self, fragment_size):
        """Test N messages linked by has_next come out in order."""
        messages = [
            _read_response(b"a" * 300, has_next=True),
            _read_response(b"b" * 300, has_next=True),
            _read_response(b"c" * 100, has_next=False),
        ]
        assembler = MessageAssembler()
        decoded = []

        for message in messages:
            for fragment in _fragments(encode_message(message), fragment_size):
                assembler.feed(fragment)
                result = assembler.try_decode()
                if result is not None:
                    decoded.append(result)
            # Buffer is empty between messages
            assert assembler.buffered == 0

        assert decoded == messages
        assert assembler.messages_decoded == 3
        assert assembler.is_complete

    def test_fragment_spanning_two_messages(self):
        """Test bytes after one message stay buffered for the next."""
        first = encode_message(_read_response(b"x" * 10, has_next=True))
        second = encode_message(_read_response(b"y" * 10, has_next=False))
        assembler = MessageAssembler()

        assembler.feed(first + second[:3])
        assert assembler.try_decode().has_next is True
        assert assembler.buffered == 3
        assert not assembler.is_complete

        assembler.feed(second[3:])
        assert assembler.try_decode().has_next is False
        assert assembler.is_complete

    def test_malformed_clears_buffer(self):
        """Test malformed data raises and leaves nothing behind."""
        assembler = MessageAssembler()
        assembler.feed(bytes([18, 0, 16, 10, 14]) + b"/ext/apps/NFC/")

        with pytest.raises(MalformedMessageError):
            assembler.try_decode()

        assert assembler.buffered == 0
        assert assembler.try_decode() is None

    def test_declared_length_exceeds_available(self):
        """Test a length prefix larger than the data waits instead of failing."""
        assembler = MessageAssembler()
        assembler.feed(b"\x64\x08\x01")

        assert assembler.try_decode() is None
        assert assembler.buffered == 3

    def test_clear(self):
        """Test clear drops partial data."""
        assembler = MessageAssembler()
        assembler.feed(b"\x05\x08")

        assembler.clear()

        assert assembler.buffered == 0
