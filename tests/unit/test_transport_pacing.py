"""Test write pacing."""

import pytest

from flipperble.transport import FixedDelayPacing, NoDelayPacing, send_sequence


class _RecordingPacing:
    def __init__(self) -> None:
        self.flags: list[bool] = []

    async def chunk_sent(self, flow_control_seen: bool) -> None:
        self.flags.append(flow_control_seen)


@pytest.mark.asyncio
async def test_send_sequence_writes_in_order() -> None:
    written: list[bytes] = []
    pending = [None, b"\x00\x00\x04\x00", None]
    policy = _RecordingPacing()

    async def write(chunk: bytes) -> None:
        written.append(chunk)

    count = await send_sequence(
        [b"one", b"two", b"three"], write, lambda: pending.pop(0), policy
    )

    assert count == 3
    assert written == [b"one", b"two", b"three"]
    assert policy.flags == [False, True, False]


@pytest.mark.asyncio
async def test_send_sequence_polls_after_each_write() -> None:
    """The flow control probe runs after the write, never before it."""
    events: list[str] = []

    async def write(chunk: bytes) -> None:
        events.append(f"write {chunk.decode()}")

    def poll():
        events.append("poll")
        return None

    await send_sequence([b"a", b"b"], write, poll, NoDelayPacing())

    assert events == ["write a", "poll", "write b", "poll"]


@pytest.mark.asyncio
async def test_send_sequence_empty() -> None:
    async def write(chunk: bytes) -> None:
        raise AssertionError("nothing to write")

    assert await send_sequence([], write, lambda: None, NoDelayPacing()) == 0


@pytest.mark.asyncio
async def test_fixed_delay_pacing(monkeypatch) -> None:
    """Flow control adds the long delay before the baseline delay."""
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("flipperble.transport.pacing.asyncio.sleep", fake_sleep)
    pacing = FixedDelayPacing(chunk_delay=0.08, flow_control_delay=0.8)

    await pacing.chunk_sent(False)
    assert delays == [0.08]

    delays.clear()
    await pacing.chunk_sent(True)
    assert delays == [0.8, 0.08]


@pytest.mark.asyncio
async def test_fixed_delay_pacing_zero_skips_sleep(monkeypatch) -> None:
    async def fake_sleep(delay: float) -> None:
        raise AssertionError("should not sleep")

    monkeypatch.setattr("flipperble.transport.pacing.asyncio.sleep", fake_sleep)

    await FixedDelayPacing(chunk_delay=0, flow_control_delay=0).chunk_sent(True)
