"""Test BLEConnection notification handling and discovery."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from flipperble import discovery
from flipperble.exceptions import BLEConnectionError, BLETimeoutError
from flipperble.protocol import FLOW_CONTROL_CHAR_UUID, RX_CHAR_UUID, TX_CHAR_UUID
from flipperble.transport import BLEConnection


class _FakeClient:
    def __init__(self) -> None:
        self.is_connected = True
        self.address = "AA:BB:CC:DD:EE:FF"
        self.callbacks = {}
        self.writes: list[tuple[str, bytes, bool]] = []
        self.value = bytearray(b"\x02\x22\x00")

    async def start_notify(self, char_uuid, callback) -> None:
        self.callbacks[char_uuid] = callback

    async def write_gatt_char(self, char_uuid, data, response=False) -> None:
        self.writes.append((char_uuid, bytes(data), response))

    async def read_gatt_char(self, char_uuid) -> bytearray:
        return self.value

    async def disconnect(self) -> None:
        self.is_connected = False

    def notify(self, char_uuid: str, data: bytes) -> None:
        self.callbacks[char_uuid](None, bytearray(data))


def _connected() -> tuple[BLEConnection, _FakeClient]:
    connection = BLEConnection(address="AA:BB:CC:DD:EE:FF")
    client = _FakeClient()
    connection._client = client  # Inject fake client
    return connection, client


def test_requires_device_identifier() -> None:
    with pytest.raises(ValueError, match="required"):
        BLEConnection()


@pytest.mark.asyncio
async def test_notifications_queue_in_order() -> None:
    connection, client = _connected()
    await connection.subscribe(TX_CHAR_UUID)

    client.notify(TX_CHAR_UUID, b"first")
    client.notify(TX_CHAR_UUID, b"second")

    assert await connection.read_notification(TX_CHAR_UUID, timeout=0.1) == b"first"
    assert connection.poll_notification(TX_CHAR_UUID) == b"second"
    assert connection.poll_notification(TX_CHAR_UUID) is None


@pytest.mark.asyncio
async def test_subscribe_twice_keeps_queue() -> None:
    connection, client = _connected()
    await connection.subscribe(FLOW_CONTROL_CHAR_UUID)
    client.notify(FLOW_CONTROL_CHAR_UUID, b"\x00\x00\x04\x00")

    await connection.subscribe(FLOW_CONTROL_CHAR_UUID)

    assert connection.poll_notification(FLOW_CONTROL_CHAR_UUID) == b"\x00\x00\x04\x00"


@pytest.mark.asyncio
async def test_clear_notifications() -> None:
    connection, client = _connected()
    await connection.subscribe(TX_CHAR_UUID)
    client.notify(TX_CHAR_UUID, b"stale")
    client.notify(TX_CHAR_UUID, b"stale")

    assert connection.clear_notifications(TX_CHAR_UUID) == 2
    assert connection.poll_notification(TX_CHAR_UUID) is None


@pytest.mark.asyncio
async def test_read_notification_timeout() -> None:
    connection, _ = _connected()
    await connection.subscribe(TX_CHAR_UUID)

    with pytest.raises(BLETimeoutError, match="0.01s"):
        await connection.read_notification(TX_CHAR_UUID, timeout=0.01)


@pytest.mark.asyncio
async def test_not_subscribed() -> None:
    connection, _ = _connected()

    with pytest.raises(BLEConnectionError, match="Not subscribed"):
        connection.poll_notification(TX_CHAR_UUID)


@pytest.mark.asyncio
async def test_write_and_read() -> None:
    connection, client = _connected()

    await connection.write(RX_CHAR_UUID, b"\x03\xb2\x02\x00")
    await connection.write(RX_CHAR_UUID, b"\x02\x22\x00", response=True)

    assert client.writes == [
        (RX_CHAR_UUID, b"\x03\xb2\x02\x00", False),
        (RX_CHAR_UUID, b"\x02\x22\x00", True),
    ]
    assert await connection.read(TX_CHAR_UUID) == b"\x02\x22\x00"


@pytest.mark.asyncio
async def test_write_requires_connection() -> None:
    connection = BLEConnection(address="AA:BB:CC:DD:EE:FF")

    assert not connection.is_connected
    with pytest.raises(BLEConnectionError, match="Not connected"):
        await connection.write(RX_CHAR_UUID, b"\x00")


@pytest.mark.asyncio
async def test_disconnect_drops_queues() -> None:
    connection, client = _connected()
    await connection.subscribe(TX_CHAR_UUID)

    await connection.disconnect()

    assert not connection.is_connected
    assert connection._queues == {}


@pytest.mark.asyncio
async def test_discover_devices(monkeypatch) -> None:
    """Only devices advertising a Flipper name are reported."""
    found = {
        "a": (SimpleNamespace(name=None, address="11:11"), SimpleNamespace(local_name="Flipper Uwu2")),
        "b": (SimpleNamespace(name="Headphones", address="22:22"), SimpleNamespace(local_name=None)),
        "c": (SimpleNamespace(name="Flipper Owo", address="33:33"), SimpleNamespace(local_name=None)),
    }

    async def fake_discover(timeout, return_adv):
        assert return_adv
        return found

    monkeypatch.setattr(discovery.BleakScanner, "discover", fake_discover)

    assert await discovery.discover_devices(timeout=0.1) == {
        "Flipper Uwu2": "11:11",
        "Flipper Owo": "33:33",
    }


@pytest.mark.asyncio
async def test_find_device_by_name(monkeypatch) -> None:
    devices = [
        (SimpleNamespace(name="Headphones", address="22:22"), SimpleNamespace(local_name=None)),
        (SimpleNamespace(name=None, address="11:11"), SimpleNamespace(local_name="Flipper Uwu2")),
    ]

    async def fake_find(filterfunc, timeout):
        for device, adv in devices:
            if filterfunc(device, adv):
                return device
        return None

    monkeypatch.setattr(discovery.BleakScanner, "find_device_by_filter", fake_find)

    device = await discovery.find_device_by_name("Uwu2", timeout=0.1)
    assert device.address == "11:11"
    assert await discovery.find_device_by_name("Nope", timeout=0.1) is None
