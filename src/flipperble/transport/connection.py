"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..discovery import find_device_by_name
from ..exceptions import BLEConnectionError, BLETimeoutError

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """Manages the BLE connection to a Flipper.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Context manager for automatic cleanup
    - One notification queue per subscribed characteristic, readable
      both blocking (with timeout) and non-blocking
    """

    def __init__(
            self,
            address: str | None = None,
            ble_device: BLEDevice | None = None,
            name: str | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        The device is located by ble_device if given, else by address,
        else by scanning for an advertised name containing name.

        Args:
            address: Device MAC address (or platform UUID on macOS)
            ble_device: Optional BLEDevice from a previous scan
            name: Name fragment to look for, e.g. "Uwu2" for "Flipper Uwu2"
            timeout: Scan and connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
        """
        if address is None and ble_device is None and name is None:
            raise ValueError("One of address, ble_device or name is required")

        self.address = address
        self.ble_device = ble_device
        self.name = name
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._queues: dict[str, asyncio.Queue[bytes]] = {}

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    async def _resolve_device(self) -> BLEDevice:
        if self.ble_device:
            return self.ble_device

        if self.address:
            device = await BleakScanner.find_device_by_address(
                self.address,
                timeout=self.timeout
            )
            if device is None:
                raise BLEConnectionError(
                    f"Device {self.address} not found during scan"
                )
            return device

        device = await find_device_by_name(self.name, timeout=self.timeout)
        if device is None:
            raise BLEConnectionError(f"No device with name {self.name!r} found")
        return device

    async def connect(self) -> None:
        """Establish BLE connection to device.

        Uses bleak-retry-connector for automatic retry logic and service caching.
        The device must already be paired with this host.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        try:
            device = await self._resolve_device()

            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                device.address,
                self.max_attempts
            )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or device.address,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

            _LOGGER.info("Connected to %s (%s)", device.name, device.address)

        except BLEConnectionError:
            raise
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from device."""
        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self._client.address)
                await self._client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)
            finally:
                self._client = None
                self._queues.clear()

    def _require_client(self) -> BleakClient:
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")
        return self._client

    async def subscribe(self, char_uuid: str) -> None:
        """Start notifications (or indications) on a characteristic.

        Subscribing twice is a no-op; notifications keep queueing until read.

        Raises:
            BLEConnectionError: If not connected or subscription fails
        """
        client = self._require_client()
        if char_uuid in self._queues:
            return

        queue: asyncio.Queue[bytes] = asyncio.Queue()

        def _notification_callback(sender: BleakGATTCharacteristic, data: bytearray) -> None:
            queue.put_nowait(bytes(data))

        try:
            await client.start_notify(char_uuid, _notification_callback)
        except Exception as e:
            raise BLEConnectionError(f"Subscribe to {char_uuid} failed: {e}") from e

        self._queues[char_uuid] = queue
        _LOGGER.debug("Notifications started on %s", char_uuid)

    def _queue(self, char_uuid: str) -> asyncio.Queue[bytes]:
        try:
            return self._queues[char_uuid]
        except KeyError:
            raise BLEConnectionError(f"Not subscribed to {char_uuid}") from None

    async def write(self, char_uuid: str, data: bytes, response: bool = False) -> None:
        """Write to a characteristic.

        Args:
            char_uuid: Characteristic to write
            data: At most one transport unit of bytes
            response: Wait for a write confirmation from the device

        Raises:
            BLEConnectionError: If not connected or write fails
        """
        client = self._require_client()
        try:
            await client.write_gatt_char(char_uuid, data, response=response)
        except Exception as e:
            raise BLEConnectionError(f"Write failed: {e}") from e

    async def read(self, char_uuid: str) -> bytes:
        """Read the current value of a characteristic.

        Raises:
            BLEConnectionError: If not connected or read fails
        """
        client = self._require_client()
        try:
            return bytes(await client.read_gatt_char(char_uuid))
        except Exception as e:
            raise BLEConnectionError(f"Read failed: {e}") from e

    def poll_notification(self, char_uuid: str) -> bytes | None:
        """Get a pending notification without waiting.

        Returns:
            Oldest pending notification value, or None if there is none
        """
        try:
            return self._queue(char_uuid).get_nowait()
        except asyncio.QueueEmpty:
            return None

    async def read_notification(self, char_uuid: str, timeout: float = 5.0) -> bytes:
        """Wait for the next notification on a subscribed characteristic.

        Args:
            char_uuid: Subscribed characteristic
            timeout: Read timeout in seconds (default: 5)

        Raises:
            BLETimeoutError: If no notification arrives within timeout
        """
        queue = self._queue(char_uuid)
        try:
            return await asyncio.wait_for(queue.get(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"No notification received within {timeout}s"
            ) from e

    def clear_notifications(self, char_uuid: str) -> int:
        """Drop notifications left over from earlier commands.

        Returns:
            Number of dropped notifications
        """
        queue = self._queue(char_uuid)
        dropped = 0
        while not queue.empty():
            queue.get_nowait()
            dropped += 1
        if dropped:
            _LOGGER.debug("Dropped %d stale notifications on %s", dropped, char_uuid)
        return dropped

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
