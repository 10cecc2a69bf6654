"""Flipper device discovery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bleak import BleakScanner

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice
    from bleak.backends.scanner import AdvertisementData

_LOGGER = logging.getLogger(__name__)

FLIPPER_NAME_PREFIX = "Flipper"


def _advertised_name(device: BLEDevice, adv: AdvertisementData) -> str:
    return adv.local_name or device.name or ""


async def find_device_by_name(name: str, timeout: float = 10.0) -> BLEDevice | None:
    """Scan for a device whose advertised name contains name.

    The Flipper does not advertise its serial service, so devices are
    matched by name, e.g. "Uwu2" matches "Flipper Uwu2".

    Args:
        name: Name fragment to match
        timeout: Scan duration in seconds (default: 10)

    Returns:
        First matching device, or None
    """
    _LOGGER.debug("Scanning for device named %r (%.1fs)", name, timeout)

    device = await BleakScanner.find_device_by_filter(
        lambda d, adv: name in _advertised_name(d, adv),
        timeout=timeout,
    )
    if device is not None:
        _LOGGER.info("Found Flipper %s (%s)", device.name, device.address)
    return device


async def discover_devices(timeout: float = 10.0) -> dict[str, str]:
    """Scan for nearby Flipper devices.

    Args:
        timeout: Scan duration in seconds (default: 10)

    Returns:
        Mapping of advertised name to address
    """
    found = await BleakScanner.discover(timeout=timeout, return_adv=True)

    devices = {}
    for device, adv in found.values():
        adv_name = _advertised_name(device, adv)
        if adv_name.startswith(FLIPPER_NAME_PREFIX):
            devices[adv_name] = device.address

    _LOGGER.debug("Discovered %d Flipper devices", len(devices))
    return devices
