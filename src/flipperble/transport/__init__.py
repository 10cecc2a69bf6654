"""BLE transport layer."""

from .connection import BLEConnection
from .pacing import FixedDelayPacing, NoDelayPacing, PacingPolicy, send_sequence

__all__ = [
    "BLEConnection",
    "FixedDelayPacing",
    "NoDelayPacing",
    "PacingPolicy",
    "send_sequence",
]
