"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from nbpbridge.config.settings import ConfigError, RuntimeConfig, load_runtime_config
from nbpbridge.const import DEFAULT_BACKPLATE_DEVICE, DEFAULT_PERIODIC_INTERVAL


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "nbpbridge.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_runtime_config("nbp", tmp_path / "absent.toml")

    assert config.device_id == "nbp"
    assert config.backplate_device == DEFAULT_BACKPLATE_DEVICE
    assert config.periodic_interval == DEFAULT_PERIODIC_INTERVAL
    assert config.control_endpoint == "ipc:///tmp/nbpbridge-nbp-control"
    assert config.events_endpoint == "ipc:///tmp/nbpbridge-nbp-events"
    assert not config.debug_logging


def test_device_table_is_selected_by_identity(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[devices.nbp]
backplate_device = "/dev/ttyO2"
control = "tcp://*:2930"
events = "tcp://*:2931"

[devices.lab]
backplate_device = "/dev/ttyUSB0"
backplate_baud = 57600
periodic_interval = 5
debug = true
""",
    )

    config = load_runtime_config("lab", path)

    assert config.device_id == "lab"
    assert config.backplate_device == "/dev/ttyUSB0"
    assert config.backplate_baud == 57600
    assert config.periodic_interval == 5.0
    assert config.debug_logging
    assert config.control_endpoint == "ipc:///tmp/nbpbridge-lab-control"

    nbp = load_runtime_config("nbp", path)
    assert nbp.control_endpoint == "tcp://*:2930"
    assert nbp.events_endpoint == "tcp://*:2931"


def test_missing_device_table_uses_defaults(tmp_path: Path) -> None:
    path = _write(tmp_path, '[devices.other]\nbackplate_device = "/dev/ttyS1"\n')

    config = load_runtime_config("nbp", path)

    assert config.backplate_device == DEFAULT_BACKPLATE_DEVICE


def test_debug_flag_overrides_file(tmp_path: Path) -> None:
    path = _write(tmp_path, "[devices.nbp]\ndebug = false\n")

    assert load_runtime_config("nbp", path, debug=True).debug_logging


@pytest.mark.parametrize(
    "text",
    [
        "[devices.nbp\n",
        "devices = 3\n",
        "[devices]\nnbp = 3\n",
        "[devices.nbp]\nbackplate_baud = 0\n",
        "[devices.nbp]\nperiodic_interval = -1\n",
        "[devices.nbp]\nbackplate_baud = \"fast\"\n",
        "[devices.nbp]\nunknown_key = 1\n",
        '[devices.nbp]\ncontrol = "tcp://*:1"\nevents = "tcp://*:1"\n',
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, text: str) -> None:
    path = _write(tmp_path, text)

    with pytest.raises(ConfigError):
        load_runtime_config("nbp", path)


def test_unreadable_path_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_runtime_config("nbp", tmp_path)


def test_direct_construction_fills_endpoints() -> None:
    config = RuntimeConfig(device_id="hall", events_endpoint="tcp://*:4000")

    assert config.control_endpoint == "ipc:///tmp/nbpbridge-hall-control"
    assert config.events_endpoint == "tcp://*:4000"


def test_direct_construction_rejects_shared_endpoint() -> None:
    with pytest.raises(ValueError):
        RuntimeConfig(control_endpoint="inproc://x", events_endpoint="inproc://x")
