"""Settings loader for the backplate gateway.

Configuration is read from a TOML file holding one ``[devices.<id>]`` table
per gateway identity. The process identity (``nbp`` by default) selects the
table; missing files or tables fall back to defaults so a bare development
host can still start the daemon.

Example::

    [devices.nbp]
    backplate_device = "/dev/ttyO2"
    control = "tcp://*:2930"
    events = "tcp://*:2931"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import msgspec
import msgspec.toml

from ..const import (
    CONTROL_ENDPOINT_NAME,
    DEFAULT_BACKPLATE_BAUD,
    DEFAULT_BACKPLATE_DEVICE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DEBUG_FRAMES,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_DEVICE_ID,
    DEFAULT_PERIODIC_INTERVAL,
    EVENTS_ENDPOINT_NAME,
    default_endpoint,
)

logger = logging.getLogger(__name__)

# File keys that differ from the RuntimeConfig field names.
_KEY_ALIASES = {
    CONTROL_ENDPOINT_NAME: "control_endpoint",
    EVENTS_ENDPOINT_NAME: "events_endpoint",
    "debug": "debug_logging",
}


class ConfigError(RuntimeError):
    """Raised when the configuration file exists but cannot be used."""


class RuntimeConfig(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Strongly typed configuration for the daemon."""

    device_id: str = DEFAULT_DEVICE_ID
    backplate_device: str = DEFAULT_BACKPLATE_DEVICE
    backplate_baud: Annotated[int, msgspec.Meta(gt=0)] = DEFAULT_BACKPLATE_BAUD
    control_endpoint: str = ""
    events_endpoint: str = ""
    periodic_interval: Annotated[float, msgspec.Meta(gt=0)] = DEFAULT_PERIODIC_INTERVAL
    debug_logging: bool = DEFAULT_DEBUG_LOGGING
    debug_frames: bool = DEFAULT_DEBUG_FRAMES

    def __post_init__(self) -> None:
        if not self.control_endpoint:
            self.control_endpoint = default_endpoint(self.device_id, CONTROL_ENDPOINT_NAME)
        if not self.events_endpoint:
            self.events_endpoint = default_endpoint(self.device_id, EVENTS_ENDPOINT_NAME)
        if self.control_endpoint == self.events_endpoint:
            raise ValueError("control and events endpoints must differ")


def _read_device_section(device_id: str, path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.warning("Configuration file %s not found; using defaults.", path)
        return {}
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration {path}: {exc}") from exc

    try:
        document = msgspec.toml.decode(raw)
    except msgspec.DecodeError as exc:
        raise ConfigError(f"Malformed configuration {path}: {exc}") from exc

    devices = document.get("devices", {})
    if not isinstance(devices, dict):
        raise ConfigError(f"'devices' in {path} must be a table")

    section = devices.get(device_id)
    if section is None:
        logger.warning("No [devices.%s] table in %s; using defaults.", device_id, path)
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'devices.{device_id}' in {path} must be a table")
    return section


def load_runtime_config(
    device_id: str = DEFAULT_DEVICE_ID,
    path: str | Path = DEFAULT_CONFIG_PATH,
    *,
    debug: bool = False,
) -> RuntimeConfig:
    """Load and validate the configuration for *device_id*."""
    path = Path(path)
    section = _read_device_section(device_id, path)

    raw: dict[str, Any] = {"device_id": device_id}
    for key, value in section.items():
        raw[_KEY_ALIASES.get(key, key)] = value
    if debug:
        raw["debug_logging"] = True

    try:
        return msgspec.convert(raw, RuntimeConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError(f"Invalid configuration for device '{device_id}' in {path}: {exc}") from exc


__all__ = [
    "ConfigError",
    "RuntimeConfig",
    "load_runtime_config",
]
