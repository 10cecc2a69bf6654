"""Main Flipper BLE device class."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .config import LinkConfig
from .exceptions import BLEConnectionError, BLETimeoutError, InvalidResponseError
from .models.listing import DirectoryListing, FileEntry
from .protocol import (
    FLOW_CONTROL_CHAR_UUID,
    RX_CHAR_UUID,
    TX_CHAR_UUID,
    LogicalMessage,
    MessageAssembler,
    ProtobufCodec,
    StorageListResponse,
    StorageReadResponse,
    StorageStatResponse,
    SystemGetDateTimeResponse,
    check_command_status,
    expect_content,
)
from .transport import BLEConnection, PacingPolicy, send_sequence

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class FlipperDevice:
    """Flipper Zero reached over the BLE serial RPC service.

    Only one command runs at a time; concurrent calls wait for each other.

    Usage:
        async with FlipperDevice(name="Uwu2") as flipper:
            listing = await flipper.list_directory("/ext/apps")
            await flipper.upload_file(data, "/ext/apps/GPIO/app.fap")

        # Tests or fast links: no delays
        async with FlipperDevice(address, link_config=LinkConfig.immediate()) as flipper:
            await flipper.alert()
    """

    def __init__(
            self,
            address: str | None = None,
            ble_device: BLEDevice | None = None,
            name: str | None = None,
            link_config: LinkConfig | None = None,
            pacing: PacingPolicy | None = None,
            timeout: float = 10.0,
            disconnect_on_exit: bool = True,
    ):
        """Initialize Flipper device.

        Args:
            address: Device MAC address
            ble_device: Optional BLEDevice from a previous scan
            name: Name fragment to scan for when no address is known
            link_config: Chunk sizes and delays (default: LinkConfig())
            pacing: Pacing policy (default: fixed delays from link_config)
            timeout: BLE connection timeout in seconds (default: 10)
            disconnect_on_exit: Disconnect when leaving the context manager
        """
        self._link = link_config or LinkConfig()
        self._pacing = pacing or self._link.pacing()
        self._connection = BLEConnection(
            address=address,
            ble_device=ble_device,
            name=name,
            timeout=timeout,
        )
        self._codec = ProtobufCodec(
            unit_size=self._link.transport_unit_size,
            segment_size=self._link.file_segment_size,
        )
        self._lock = asyncio.Lock()
        self.disconnect_on_exit = disconnect_on_exit

    async def __aenter__(self) -> FlipperDevice:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.disconnect_on_exit:
            await self.disconnect()

    async def connect(self) -> None:
        await self._connection.connect()

    async def disconnect(self) -> None:
        await self._connection.disconnect()

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    @property
    def command_id(self) -> int:
        """Command id the next request will carry."""
        return self._codec.command_id

    @property
    def link_config(self) -> LinkConfig:
        return self._link

    # ------------------------------------------------------------ plumbing

    def _ensure_connected(self) -> None:
        if not self._connection.is_connected:
            raise BLEConnectionError("Device not connected")

    async def _start_send(self) -> None:
        """Subscribe to flow control and drop hints left over from earlier writes."""
        await self._connection.subscribe(FLOW_CONTROL_CHAR_UUID)
        self._connection.clear_notifications(FLOW_CONTROL_CHAR_UUID)

    async def _send(self, packets: list[bytes] | tuple[bytes, ...]) -> None:
        """Send one paced sequence of chunks."""
        await self._start_send()
        await self._send_paced(packets)

    async def _send_paced(self, packets: list[bytes] | tuple[bytes, ...]) -> None:
        """Send chunks write-without-response, paced. Requires _start_send."""
        async def write(chunk: bytes) -> None:
            await self._connection.write(RX_CHAR_UUID, chunk, response=False)

        await send_sequence(
            packets,
            write,
            lambda: self._connection.poll_notification(FLOW_CONTROL_CHAR_UUID),
            self._pacing,
        )

    async def _send_confirmed(self, packets: list[bytes]) -> None:
        """Send chunks with write confirmation from the device."""
        for packet in packets:
            await self._connection.write(RX_CHAR_UUID, packet, response=True)

    async def _start_receive(self) -> None:
        """Subscribe to responses and drop leftovers of earlier commands."""
        await self._connection.subscribe(TX_CHAR_UUID)
        self._connection.clear_notifications(TX_CHAR_UUID)

    async def _read_reply(self) -> LogicalMessage:
        """Read a short reply straight from the TX characteristic value."""
        data = await self._connection.read(TX_CHAR_UUID)
        message = self._codec.decode(data)
        _LOGGER.debug("Response received: %s", message)
        return message

    async def _receive_stream(self, handle: Callable[[LogicalMessage], None]) -> int:
        """Reassemble and handle messages until one arrives without has_next.

        Args:
            handle: Called with every decoded message, in order; may raise
                to abort the stream

        Returns:
            Number of messages received

        Raises:
            MalformedMessageError: If the notification data cannot be decoded
            BLETimeoutError: If the device stops sending mid-stream
        """
        assembler = MessageAssembler()
        while not assembler.is_complete:
            try:
                fragment = await self._connection.read_notification(
                    TX_CHAR_UUID, timeout=self._link.response_timeout
                )
            except BLETimeoutError as e:
                # The device silently ends its RPC session after a decode error
                raise BLETimeoutError(
                    f"{e} ({assembler.messages_decoded} messages and "
                    f"{assembler.buffered} bytes received; the RPC session may "
                    f"have been closed by the device, reconnect to recover)"
                ) from e

            assembler.feed(fragment)
            message = assembler.try_decode()
            while message is not None:
                handle(message)
                if not message.has_next:
                    break
                message = assembler.try_decode()

        return assembler.messages_decoded

    async def _request_single(
            self,
            packets: list[bytes],
            expected: type,
            *,
            empty_means_invalid_path: bool = False,
    ):
        """Send a request and wait for its single streamed response."""
        result = []

        def handle(message: LogicalMessage) -> None:
            check_command_status(message)
            result.append(expect_content(
                message, expected, empty_means_invalid_path=empty_means_invalid_path
            ))

        await self._start_receive()
        await self._send(packets)
        await self._receive_stream(handle)
        return result[-1]

    # ------------------------------------------------------------ commands

    async def upload_file(
            self,
            data: bytes,
            dest: str,
            progress: ProgressCallback | None = None,
    ) -> None:
        """Upload file contents to a path on the device.

        Args:
            data: File contents
            dest: Full device path including file name, e.g. /ext/apps/GPIO/app.fap
            progress: Called with (file bytes sent, total file bytes) after
                every segment

        Raises:
            CommandFailedError: If the device rejects the write
        """
        async with self._lock:
            self._ensure_connected()
            segments = self._codec.create_write_request_segments(data, dest)
            _LOGGER.info("Uploading %d bytes to %s in %d segments", len(data), dest, len(segments))

            # One sequence for all segments: hints seen between segments still count
            await self._start_send()

            sent = 0
            for segment in segments:
                await self._send_paced(segment.packets)
                sent += segment.file_byte_count
                if progress:
                    progress(sent, len(data))

            _LOGGER.debug("Sent all segments")

            # The device answers once, after the last segment
            await asyncio.sleep(self._link.upload_response_delay)
            check_command_status(await self._read_reply())

            _LOGGER.info("Upload complete")

    async def download_file(
            self,
            path: str,
            progress: ProgressCallback | None = None,
            acknowledge: bool = True,
    ) -> bytes:
        """Download a file from the device.

        Args:
            path: Full device path of the file
            progress: Called with (file bytes received, file size) after
                every data message
            acknowledge: Send an OK message once the transfer is complete

        Returns:
            File contents

        Raises:
            InvalidPathError: If the path does not exist
        """
        async with self._lock:
            self._ensure_connected()
            stat = await self._request_single(
                self._codec.create_stat_request(path),
                StorageStatResponse,
                empty_means_invalid_path=True,
            )
            total = stat.file.size if stat.file is not None else 0
            _LOGGER.info("Downloading %s (%d bytes)", path, total)

            contents = bytearray()

            def handle(message: LogicalMessage) -> None:
                check_command_status(message)
                response = expect_content(
                    message, StorageReadResponse, empty_means_invalid_path=True
                )
                if response.file is not None:
                    contents.extend(response.file.data)
                if progress:
                    progress(len(contents), total)

            self._connection.clear_notifications(TX_CHAR_UUID)
            await self._send_confirmed(self._codec.create_read_request(path))
            await asyncio.sleep(self._link.read_request_delay)
            count = await self._receive_stream(handle)

            _LOGGER.debug("Received %d data messages, %d bytes", count, len(contents))

            if acknowledge:
                await self._send(self._codec.create_ok_response())
                _LOGGER.debug("Sent OK to device")

            return bytes(contents)

    async def stat(self, path: str) -> FileEntry:
        """Get name, type and size of a file or directory.

        Raises:
            InvalidPathError: If the path does not exist
        """
        async with self._lock:
            self._ensure_connected()
            response = await self._request_single(
                self._codec.create_stat_request(path),
                StorageStatResponse,
                empty_means_invalid_path=True,
            )
            if response.file is None:
                raise InvalidResponseError(f"Stat response for {path} has no file")
            entry = FileEntry.from_storage_file(response.file)
            if not entry.name:
                entry = FileEntry(name=path, type=entry.type, size=entry.size)
            return entry

    async def list_directory(self, path: str) -> DirectoryListing:
        """List a device directory.

        Args:
            path: Device directory, e.g. /ext/apps

        Returns:
            Directories and files, each sorted by name

        Raises:
            InvalidPathError: If the path does not exist
        """
        async with self._lock:
            self._ensure_connected()
            entries: list[FileEntry] = []

            def handle(message: LogicalMessage) -> None:
                check_command_status(message)
                response = expect_content(
                    message, StorageListResponse, empty_means_invalid_path=True
                )
                entries.extend(FileEntry.from_storage_file(f) for f in response.files)

            await self._start_receive()
            await self._send(self._codec.create_list_request(path))
            await self._receive_stream(handle)

            listing = DirectoryListing.from_entries(path, entries)
            _LOGGER.debug(
                "Listed %s: %d directories, %d files",
                path,
                len(listing.directories),
                len(listing.files),
            )
            return listing

    async def launch(self, path: str, args: str = "") -> None:
        """Launch an app.

        Args:
            path: Full path of a .fap file ("/ext/apps/...") or the name of
                a built-in app (e.g. "NFC")
            args: Arguments for the app, e.g. a file to open

        Raises:
            InvalidParametersError: If the app path is invalid
            AppCantStartError: If the app cannot start
            DeviceBusyError: If another app is running
        """
        async with self._lock:
            self._ensure_connected()
            await self._send_confirmed(self._codec.create_launch_request(path, args))
            check_command_status(await self._read_reply())
            _LOGGER.info("Launched %s", path)

    async def delete(self, path: str, recursive: bool = False) -> None:
        """Delete a file or directory.

        Args:
            path: Full device path
            recursive: Delete directory contents too
        """
        async with self._lock:
            self._ensure_connected()
            await self._send_confirmed(self._codec.create_delete_request(path, recursive))
            check_command_status(await self._read_reply())
            _LOGGER.info("Deleted %s", path)

    async def alert(self) -> None:
        """Play the buzz-and-flash alert to help find the device."""
        async with self._lock:
            self._ensure_connected()
            await self._send(self._codec.create_alert_request())

    async def get_datetime(self) -> dt.datetime:
        """Read the device clock (naive, device-local time)."""
        async with self._lock:
            self._ensure_connected()
            response = await self._request_single(
                self._codec.create_get_datetime_request(),
                SystemGetDateTimeResponse,
            )
            if response.datetime is None:
                raise InvalidResponseError("Date/time response has no datetime")
            try:
                return response.datetime.to_datetime()
            except ValueError as e:
                raise InvalidResponseError(f"Device reported invalid date/time: {e}") from e

    async def set_datetime(self, value: dt.datetime) -> None:
        """Set the device clock to the wall-clock fields of value."""
        async with self._lock:
            self._ensure_connected()
            _LOGGER.debug("Setting date/time %s", value)
            await self._send(self._codec.create_set_datetime_request(value))

    async def sync_datetime(self) -> dt.datetime:
        """Set the device clock to this computer's local time.

        Returns:
            The time that was sent
        """
        now = dt.datetime.now()
        await self.set_datetime(now)
        return now
