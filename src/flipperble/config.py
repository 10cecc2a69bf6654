"""Link tuning for the Flipper BLE serial service."""

from __future__ import annotations

from dataclasses import dataclass

from .protocol.commands import FILE_SEGMENT_SIZE, TRANSPORT_UNIT_SIZE
from .transport.pacing import FixedDelayPacing


@dataclass(frozen=True, slots=True)
class LinkConfig:
    """Sizes and delays used when talking to the device.

    None of these values come from the protocol. They were tuned by hand
    against real adapters and may need changing for a different link.

    Attributes:
        transport_unit_size: Maximum bytes per characteristic write
        file_segment_size: File bytes per WriteRequest message
        chunk_delay: Sleep after every chunk write (seconds)
        flow_control_delay: Extra sleep when a flow control notification
            was pending after a write (seconds)
        upload_response_delay: Sleep between the last upload chunk and
            reading the response (seconds)
        read_request_delay: Sleep after sending a ReadRequest (seconds)
        response_timeout: Maximum wait for one notification (seconds)
    """

    transport_unit_size: int = TRANSPORT_UNIT_SIZE
    file_segment_size: int = FILE_SEGMENT_SIZE
    chunk_delay: float = 0.08
    flow_control_delay: float = 0.8
    upload_response_delay: float = 0.4
    read_request_delay: float = 0.2
    response_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.transport_unit_size <= 0:
            raise ValueError(
                f"transport_unit_size must be positive, got {self.transport_unit_size}"
            )
        if self.file_segment_size <= 0:
            raise ValueError(
                f"file_segment_size must be positive, got {self.file_segment_size}"
            )
        for name in ("chunk_delay", "flow_control_delay", "upload_response_delay", "read_request_delay"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        if self.response_timeout <= 0:
            raise ValueError(
                f"response_timeout must be positive, got {self.response_timeout}"
            )

    @classmethod
    def immediate(cls, response_timeout: float = 1.0) -> LinkConfig:
        """Config without any delays, for tests and loopback links."""
        return cls(
            chunk_delay=0.0,
            flow_control_delay=0.0,
            upload_response_delay=0.0,
            read_request_delay=0.0,
            response_timeout=response_timeout,
        )

    def pacing(self) -> FixedDelayPacing:
        """Pacing policy using this config's delays."""
        return FixedDelayPacing(
            chunk_delay=self.chunk_delay,
            flow_control_delay=self.flow_control_delay,
        )
