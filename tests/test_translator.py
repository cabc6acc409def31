"""Tests for callback-to-event translation and the cached device state."""

from __future__ import annotations

import logging

import pytest

from nbpbridge.bus.messages import Battery, Event, Weather, WireChange
from nbpbridge.device.protocol import HvacWire, Tristate
from nbpbridge.services.translator import (
    EventTranslator,
    centi_celsius_to_milli_fahrenheit,
    is_charging,
)
from nbpbridge.state.context import DeviceState


@pytest.fixture
def state() -> DeviceState:
    return DeviceState()


@pytest.fixture
def translator(state: DeviceState) -> EventTranslator:
    return EventTranslator(state)


def test_fahrenheit_conversion() -> None:
    assert centi_celsius_to_milli_fahrenheit(2150) == 70700
    assert centi_celsius_to_milli_fahrenheit(0) == 32000
    assert centi_celsius_to_milli_fahrenheit(10000) == 212000


def test_charging_flag_is_inverted() -> None:
    assert is_charging(0x00)
    assert not is_charging(0x40)
    assert is_charging(0x3F)
    assert not is_charging(0xFF)


def test_fresh_state_knows_nothing(translator: EventTranslator) -> None:
    assert translator.snapshot() == Event()


def test_weather_records_and_logs(
    translator: EventTranslator, state: DeviceState, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO):
        event = translator.weather(2150, 450)

    assert event == Event(weather=Weather(temperature=2150, humidity=450))
    assert state.has_weather
    assert (state.temperature, state.humidity) == (2150, 450)
    assert "21.50 C" in caplog.text
    assert "70.700 F" in caplog.text
    assert "Humidity: 45.0%" in caplog.text


@pytest.mark.parametrize(("flags", "charging"), [(0x40, False), (0x00, True)])
def test_power_status_charging(translator: EventTranslator, flags: int, charging: bool) -> None:
    event = translator.power_status(flags, 3812)

    assert event == Event(battery=Battery(charging=charging, voltage=3812))


def test_power_status_logs_all_rails(translator: EventTranslator, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO):
        translator.power_status(0x40, 3812, vi_cv=2345, vo_mv=4950)

    assert "power status: flags 40, vi 23.45V, vo 4.950V; vb 3.812V" in caplog.text


def test_wire_change(translator: EventTranslator, state: DeviceState, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO):
        event = translator.wire_assertion_changed(HvacWire.Y1, True)

    assert event == Event(wire_change=[WireChange(wire=HvacWire.Y1, connected=True)])
    assert state.wire_state(HvacWire.Y1) == Tristate.ASSERTED
    assert "Setting FET Y1 to 1" in caplog.text


def test_log_forwards_backplate_text(translator: EventTranslator, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO):
        translator.log("fet 3 short")

    assert "Backplate: fet 3 short" in caplog.text


def test_snapshot_reports_only_known_parts(state: DeviceState, translator: EventTranslator) -> None:
    state.record_weather(2150, 450)
    state.record_wire(HvacWire.W1, True)

    event = translator.snapshot()

    assert event.weather == Weather(temperature=2150, humidity=450)
    assert event.battery is None
    assert event.wire_change == [WireChange(wire=HvacWire.W1, connected=True)]


def test_snapshot_full_state(state: DeviceState, translator: EventTranslator) -> None:
    state.record_power(0x00, 4012)
    state.record_wire(HvacWire.STAR, False)
    state.record_wire(HvacWire.G, True)

    event = translator.snapshot()

    assert event.weather is None
    assert event.battery == Battery(charging=True, voltage=4012)
    assert event.wire_change == [
        WireChange(wire=HvacWire.G, connected=True),
        WireChange(wire=HvacWire.STAR, connected=False),
    ]


def test_state_known_wires_skip_unknown(state: DeviceState) -> None:
    state.record_wire(HvacWire.OB, False)
    assert list(state.known_wires()) == [(HvacWire.OB, False)]


def test_snapshot_reads_wires_from_device(state: DeviceState) -> None:
    device_wires = {HvacWire.Y2: Tristate.ASSERTED}
    translator = EventTranslator(state, lambda wire: device_wires.get(wire, Tristate.UNKNOWN))
    state.record_wire(HvacWire.W1, True)

    event = translator.snapshot()

    assert event.wire_change == [WireChange(wire=HvacWire.Y2, connected=True)]
    assert state.wire_state(HvacWire.W1) == Tristate.UNKNOWN
