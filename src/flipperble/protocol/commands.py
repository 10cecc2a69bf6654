"""BLE protocol constants for the Flipper serial RPC service."""

from __future__ import annotations

# GATT UUIDs of the Flipper serial service
SERIAL_SERVICE_UUID = "8fe5b3d5-2e7f-4a98-2a48-7acc60fe0000"
RX_CHAR_UUID = "19ed82ae-ed21-4c9d-4145-228e62fe0000"         # host -> device writes
TX_CHAR_UUID = "19ed82ae-ed21-4c9d-4145-228e61fe0000"         # device -> host (read/indicate)
FLOW_CONTROL_CHAR_UUID = "19ed82ae-ed21-4c9d-4145-228e63fe0000"  # free RX buffer space, uint32 BE

# Chunking constants
# A characteristic write carries at most 512 bytes; the rest is headroom.
TRANSPORT_UNIT_SIZE = 350
# File bytes per WriteRequest. Larger segments overrun the device RPC buffer.
FILE_SEGMENT_SIZE = 512

# Default directory for listings
DEFAULT_LIST_PATH = "/ext"


def parse_flow_control_value(data: bytes) -> int | None:
    """Decode the free buffer space reported on the flow control characteristic.

    Args:
        data: Raw notification value

    Returns:
        Free bytes in the device receive buffer, or None if the value is too short
    """
    if len(data) < 4:
        return None
    return int.from_bytes(data[:4], byteorder="big")
