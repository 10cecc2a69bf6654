"""Write pacing for the BLE serial link.

The device has no per-chunk acknowledgement. Writes are throttled with
fixed delays, and a pending notification on the flow control
characteristic is taken as a hint to back off for longer. The value of
that notification is not used for buffer accounting: in practice it
always reports an empty buffer, but backing off when it shows up is
what keeps uploads from overrunning the device.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from ..protocol.commands import parse_flow_control_value

_LOGGER = logging.getLogger(__name__)

ChunkWriter = Callable[[bytes], Awaitable[None]]
FlowControlProbe = Callable[[], bytes | None]


class PacingPolicy(Protocol):
    """Decides how long to wait after each chunk write."""

    async def chunk_sent(self, flow_control_seen: bool) -> None:
        """Called after every chunk write, before the next one."""


@dataclass(frozen=True, slots=True)
class FixedDelayPacing:
    """Sleep a fixed time after every chunk, longer after flow control.

    Attributes:
        chunk_delay: Baseline sleep after every chunk (seconds)
        flow_control_delay: Additional sleep when flow control was seen (seconds)
    """

    chunk_delay: float = 0.08
    flow_control_delay: float = 0.8

    async def chunk_sent(self, flow_control_seen: bool) -> None:
        if flow_control_seen and self.flow_control_delay:
            await asyncio.sleep(self.flow_control_delay)
        if self.chunk_delay:
            await asyncio.sleep(self.chunk_delay)


class NoDelayPacing:
    """Never sleeps. For tests and links that need no throttling."""

    async def chunk_sent(self, flow_control_seen: bool) -> None:
        return None


async def send_sequence(
        chunks: Iterable[bytes],
        write: ChunkWriter,
        poll_flow_control: FlowControlProbe,
        policy: PacingPolicy,
) -> int:
    """Write chunks in order, pacing between them.

    After each write the flow control probe is polled without blocking,
    so notifications arriving while sending never stall the send path.

    Args:
        chunks: Transport chunks of one or more messages
        write: Writes one chunk (without response)
        poll_flow_control: Returns a pending flow control value or None
        policy: Pacing policy

    Returns:
        Number of chunks written
    """
    count = 0
    for chunk in chunks:
        await write(chunk)
        count += 1

        pending = poll_flow_control()
        flow_control_seen = pending is not None
        if flow_control_seen:
            _LOGGER.debug(
                "Flow control after chunk %d (free buffer: %s)",
                count,
                parse_flow_control_value(pending),
            )

        await policy.chunk_sent(flow_control_seen)

    return count
