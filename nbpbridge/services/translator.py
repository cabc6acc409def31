"""Translation from backplate callbacks to bus events."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..bus.messages import Battery, Event, Weather, WireChange
from ..const import POWER_FLAG_NOT_CHARGING
from ..device.protocol import HvacWire, Tristate
from ..state.context import DeviceState

logger = logging.getLogger("nbpbridge.service.translator")

WireQuery = Callable[[HvacWire], Tristate]


def centi_celsius_to_milli_fahrenheit(temperature: int) -> int:
    return temperature * 90 // 5 + 32000


def is_charging(flags: int) -> bool:
    return not flags & POWER_FLAG_NOT_CHARGING


class EventTranslator:
    """Record callback data into :class:`DeviceState` and build events from it.

    When *query_wire* is given, snapshots read wire assertions through it and
    overwrite the cached table, which then matches the device after a reset.
    """

    def __init__(self, state: DeviceState, query_wire: WireQuery | None = None) -> None:
        self.state = state
        self._query_wire = query_wire

    def log(self, text: str) -> None:
        logger.info("Backplate: %s", text)

    def weather(self, temperature: int, humidity: int) -> Event:
        fahrenheit = centi_celsius_to_milli_fahrenheit(temperature)
        logger.info(
            "Temperature %3d.%02d C (%4d.%03d F)    Humidity: %d.%d%%",
            temperature // 100,
            temperature % 100,
            fahrenheit // 1000,
            fahrenheit % 1000,
            humidity // 10,
            humidity % 10,
        )
        self.state.record_weather(temperature, humidity)
        return Event(weather=Weather(temperature=temperature, humidity=humidity))

    def power_status(
        self,
        flags: int,
        battery_mv: int,
        *,
        vi_cv: int | None = None,
        vo_mv: int | None = None,
    ) -> Event:
        if vi_cv is not None and vo_mv is not None:
            logger.info(
                "power status: flags %02x, vi %d.%02dV, vo %d.%03dV; vb %d.%03dV",
                flags,
                vi_cv // 100,
                vi_cv % 100,
                vo_mv // 1000,
                vo_mv % 1000,
                battery_mv // 1000,
                battery_mv % 1000,
            )
        else:
            logger.info("power status: flags %02x, vb %d.%03dV", flags, battery_mv // 1000, battery_mv % 1000)
        self.state.record_power(flags, battery_mv)
        return Event(battery=Battery(charging=is_charging(flags), voltage=battery_mv))

    def wire_assertion_changed(self, wire: HvacWire, connected: bool) -> Event:
        wire = HvacWire(wire)
        logger.info("Setting FET %s to %d", wire.name, int(connected))
        self.state.record_wire(wire, connected)
        return Event(wire_change=[WireChange(wire=wire, connected=connected)])

    def snapshot(self) -> Event:
        """Build one event carrying every known piece of device state."""
        state = self.state
        if self._query_wire is not None:
            state.sync_wires(self._query_wire)
        weather = None
        if state.has_weather:
            weather = Weather(temperature=state.temperature, humidity=state.humidity)
        battery = None
        if state.has_power:
            battery = Battery(charging=is_charging(state.power_flags), voltage=state.battery_mv)
        wire_change = [WireChange(wire=wire, connected=connected) for wire, connected in state.known_wires()]
        return Event(weather=weather, battery=battery, wire_change=wire_change)
