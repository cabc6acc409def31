"""Shared constants for the backplate gateway components."""
from __future__ import annotations

from typing import Final

DEFAULT_DEVICE_ID: Final[str] = "nbp"
DEFAULT_CONFIG_PATH: Final[str] = "/etc/nbpbridge.toml"
DEFAULT_BACKPLATE_DEVICE: Final[str] = "/dev/ttyO2"
DEFAULT_BACKPLATE_BAUD: Final[int] = 115200
DEFAULT_PERIODIC_INTERVAL: Final[float] = 30.0
DEFAULT_DEBUG_LOGGING: Final[bool] = False
DEFAULT_DEBUG_FRAMES: Final[bool] = False

# Endpoint names looked up per device identity.
CONTROL_ENDPOINT_NAME: Final[str] = "control"
EVENTS_ENDPOINT_NAME: Final[str] = "events"

# Bit 6 of the power status flags byte is set while the battery is NOT charging.
POWER_FLAG_NOT_CHARGING: Final[int] = 0x40

# First byte of an XPUB notice frame.
XPUB_UNSUBSCRIBE: Final[int] = 0x00
XPUB_SUBSCRIBE: Final[int] = 0x01


def default_endpoint(device_id: str, name: str) -> str:
    return f"ipc:///tmp/nbpbridge-{device_id}-{name}"


__all__ = [
    "DEFAULT_DEVICE_ID",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_BACKPLATE_DEVICE",
    "DEFAULT_BACKPLATE_BAUD",
    "DEFAULT_PERIODIC_INTERVAL",
    "DEFAULT_DEBUG_LOGGING",
    "DEFAULT_DEBUG_FRAMES",
    "CONTROL_ENDPOINT_NAME",
    "EVENTS_ENDPOINT_NAME",
    "POWER_FLAG_NOT_CHARGING",
    "XPUB_UNSUBSCRIBE",
    "XPUB_SUBSCRIBE",
    "default_endpoint",
]
