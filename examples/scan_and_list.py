"""Scan for Flipper devices and list a directory on the first one found.

Usage:
    python examples/scan_and_list.py --duration 10
    python examples/scan_and_list.py --path /ext/apps --alert
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from flipperble import FlipperDevice, FlipperError, discover_devices


async def scan_and_list(duration: float, path: str, alert: bool) -> None:
    """Discover Flippers, connect to the first and print a listing."""
    print(f"Scanning for Flipper devices ({duration:.1f}s)...")
    devices = await discover_devices(timeout=duration)
    if not devices:
        print("No Flipper found. Is Bluetooth enabled on the device?")
        return

    for name, address in sorted(devices.items()):
        print(f"  {name} ({address})")

    name, address = next(iter(sorted(devices.items())))
    print(f"\nConnecting to {name}...")

    try:
        async with FlipperDevice(address=address) as flipper:
            if alert:
                await flipper.alert()

            clock = await flipper.get_datetime()
            print(f"Device time: {clock.isoformat(timespec='seconds')}")

            listing = await flipper.list_directory(path)
            print(f"\n{path}: {len(listing.directories)} directories, {len(listing.files)} files")
            for entry in listing:
                size = "" if entry.size is None else f" ({entry.size} bytes)"
                print(f"  {'d' if entry.is_dir else '-'} {entry.name}{size}")
    except FlipperError as err:
        print(f"Failed: {err}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan for Flipper devices and list a directory over BLE."
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Scan duration in seconds. Default: 10",
    )
    parser.add_argument(
        "--path",
        default="/ext",
        help="Directory to list. Default: /ext",
    )
    parser.add_argument(
        "--alert",
        action="store_true",
        help="Play the find-my-Flipper alert after connecting.",
    )
    parser.add_argument("--debug", action="store_true", help="Log protocol traffic.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    try:
        asyncio.run(scan_and_list(duration=args.duration, path=args.path, alert=args.alert))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
