"""
Command-line interface for Flipper BLE file and app management.

Usage:
    flipperble -n <name> ls [path]
    flipperble -n <name> upload <file> <dest>
    flipperble -n <name> download <file> <dest>
    flipperble -n <name> rm <file> [--no-recursive]
    flipperble -n <name> launch <app> [args]
    flipperble -n <name> stat <path>
    flipperble -n <name> alert
    flipperble -n <name> synctime
    flipperble -n <name> gettime
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .device import FlipperDevice, ProgressCallback
from .exceptions import FlipperError
from .protocol import DEFAULT_LIST_PATH

_LOGGER = logging.getLogger(__name__)


def _progress_logger(label: str) -> ProgressCallback:
    """Log transfer progress in 10% steps."""
    last_step = -1

    def report(done: int, total: int) -> None:
        nonlocal last_step
        step = 10 if total == 0 else done * 10 // total
        if step != last_step:
            last_step = step
            _LOGGER.info("%s: %d/%d bytes (%d%%)", label, done, total, step * 10)

    return report


async def cmd_ls(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Print directories and files at a device path."""
    listing = await flipper.list_directory(args.path)
    print(f"files at Flipper path {args.path!r}:")
    for entry in listing.directories:
        print(f" dir:  {entry.name}")
    for entry in listing.files:
        print(f" file: {entry.name}, size: {entry.size}")


async def cmd_upload(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Upload a local file."""
    data = Path(args.file).read_bytes()
    await flipper.upload_file(data, args.dest, progress=_progress_logger("upload"))
    _LOGGER.info("sent file successfully")


async def cmd_download(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Download a device file."""
    data = await flipper.download_file(args.file, progress=_progress_logger("download"))
    Path(args.dest).write_bytes(data)
    _LOGGER.info("downloaded file successfully")


async def cmd_rm(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Delete a device file or directory."""
    await flipper.delete(args.file, recursive=args.recursive)
    _LOGGER.info("deleted file successfully")


async def cmd_launch(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Launch an app."""
    await flipper.launch(args.app, args.args)
    _LOGGER.info("launched app successfully")


async def cmd_stat(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Print information about one path."""
    entry = await flipper.stat(args.path)
    kind = "dir" if entry.is_dir else "file"
    size = "" if entry.size is None else f", size: {entry.size}"
    print(f" {kind}: {entry.name}{size}")


async def cmd_alert(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Play the device alert."""
    await flipper.alert()
    _LOGGER.info("alert sent!")


async def cmd_synctime(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Set the device clock to local time."""
    now = await flipper.sync_datetime()
    _LOGGER.info("Flipper date and time set to %s", now.isoformat(timespec="seconds"))


async def cmd_gettime(flipper: FlipperDevice, args: argparse.Namespace) -> None:
    """Print the device clock."""
    value = await flipper.get_datetime()
    print(value.isoformat(timespec="seconds"))


HANDLERS = {
    "ls": cmd_ls,
    "upload": cmd_upload,
    "download": cmd_download,
    "rm": cmd_rm,
    "launch": cmd_launch,
    "stat": cmd_stat,
    "alert": cmd_alert,
    "synctime": cmd_synctime,
    "gettime": cmd_gettime,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flipperble",
        description="Manage files and apps on a Flipper Zero over Bluetooth LE"
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("-n", "--name", dest="flipper_name",
                        help='Unique Flipper name, like "Uwu2" for "Flipper Uwu2"')
    target.add_argument("-a", "--address", help="Flipper BLE address")
    parser.add_argument("-d", "--disconnect", action="store_true",
                        help="Disconnect from the Flipper after the command finishes")
    parser.add_argument("-t", "--timeout", type=float, default=10.0,
                        help="Scan/connect timeout in seconds (default: 10)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upload_parser = subparsers.add_parser("upload", help="Upload a local file to the Flipper")
    upload_parser.add_argument("file", help="Local file to upload")
    upload_parser.add_argument("dest", help="Full Flipper path including file name to upload to")

    download_parser = subparsers.add_parser("download", help="Download a file from the Flipper")
    download_parser.add_argument("file", help="Flipper file to download")
    download_parser.add_argument("dest", help="Destination path on this computer including file name")

    rm_parser = subparsers.add_parser("rm", help="Delete a file or directory on the Flipper")
    rm_parser.add_argument("file", help="Flipper file or directory to delete")
    rm_parser.add_argument("--no-recursive", dest="recursive", action="store_false",
                           help="Fail instead of deleting a non-empty directory")

    launch_parser = subparsers.add_parser("launch", help="Launch an app on the Flipper")
    launch_parser.add_argument("app", help='A full path ("/ext/apps/...") or the name of a built-in app (e.g. "NFC")')
    launch_parser.add_argument("args", nargs="?", default="",
                               help="Arguments to run the app with, e.g. a file to open")

    ls_parser = subparsers.add_parser("ls", help="Get a file listing of a Flipper directory")
    ls_parser.add_argument("path", nargs="?", default=DEFAULT_LIST_PATH,
                           help=f"Flipper directory (default: {DEFAULT_LIST_PATH})")

    stat_parser = subparsers.add_parser("stat", help="Show type and size of a Flipper path")
    stat_parser.add_argument("path", help="Flipper file or directory")

    subparsers.add_parser("alert", help="Play the Flipper's buzzing and flashing alert")
    subparsers.add_parser("synctime", help="Set the Flipper's date and time to this computer's")
    subparsers.add_parser("gettime", help="Print the Flipper's date and time")

    return parser


async def run(args: argparse.Namespace) -> int:
    """Connect, run one command, and report errors."""
    flipper = FlipperDevice(
        address=args.address,
        name=args.flipper_name,
        timeout=args.timeout,
        disconnect_on_exit=args.disconnect,
    )
    target = args.flipper_name or args.address

    try:
        await flipper.connect()
    except FlipperError as e:
        _LOGGER.error("error finding Flipper %s: %s", target, e)
        return 1

    try:
        async with flipper:
            await HANDLERS[args.command](flipper, args)
    except (FlipperError, OSError) as e:
        _LOGGER.error("%s failed: %s", args.command, e)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
