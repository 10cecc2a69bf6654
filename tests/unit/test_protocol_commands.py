"""Test protocol constants."""

from flipperble.protocol import (
    FILE_SEGMENT_SIZE,
    FLOW_CONTROL_CHAR_UUID,
    RX_CHAR_UUID,
    SERIAL_SERVICE_UUID,
    TRANSPORT_UNIT_SIZE,
    TX_CHAR_UUID,
    parse_flow_control_value,
)


class TestConstants:
    """Test GATT UUIDs and sizes."""

    def test_characteristic_uuids(self):
        """Test the serial service characteristics."""
        assert SERIAL_SERVICE_UUID == "8fe5b3d5-2e7f-4a98-2a48-7acc60fe0000"
        assert RX_CHAR_UUID == "19ed82ae-ed21-4c9d-4145-228e62fe0000"
        assert TX_CHAR_UUID == "19ed82ae-ed21-4c9d-4145-228e61fe0000"
        assert FLOW_CONTROL_CHAR_UUID == "19ed82ae-ed21-4c9d-4145-228e63fe0000"

    def test_sizes(self):
        """Test transport unit and file segment sizes."""
        assert TRANSPORT_UNIT_SIZE == 350
        assert FILE_SEGMENT_SIZE == 512
        assert TRANSPORT_UNIT_SIZE <= 512


class TestParseFlowControlValue:
    """Test flow control notification decoding."""

    def test_big_endian(self):
        """Test value is uint32 big-endian."""
        assert parse_flow_control_value(b"\x00\x00\x04\x00") == 1024

    def test_extra_bytes_ignored(self):
        """Test only the first four bytes count."""
        assert parse_flow_control_value(b"\x00\x00\x00\x01\xff") == 1

    def test_too_short(self):
        """Test short values are not decoded."""
        assert parse_flow_control_value(b"\x00\x01") is None
        assert parse_flow_control_value(b"") is None
