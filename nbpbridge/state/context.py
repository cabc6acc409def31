"""Cached backplate telemetry for the gateway process."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import msgspec

from ..device.protocol import WIRE_COUNT, HvacWire, Tristate


def _unknown_wires_factory() -> list[Tristate]:
    return [Tristate.UNKNOWN] * WIRE_COUNT


class DeviceState(msgspec.Struct):
    """Last-known device telemetry.

    Written only from device callback dispatch; ``has_*`` stay false until the
    matching callback has fired once since process start.
    """

    has_weather: bool = False
    temperature: int = 0
    humidity: int = 0
    has_power: bool = False
    power_flags: int = 0
    battery_mv: int = 0
    wires: list[Tristate] = msgspec.field(default_factory=_unknown_wires_factory)

    def record_weather(self, temperature: int, humidity: int) -> None:
        self.has_weather = True
        self.temperature = temperature
        self.humidity = humidity

    def record_power(self, flags: int, battery_mv: int) -> None:
        self.has_power = True
        self.power_flags = flags
        self.battery_mv = battery_mv

    def record_wire(self, wire: HvacWire, connected: bool) -> None:
        self.wires[HvacWire(wire)] = Tristate.from_bool(connected)

    def wire_state(self, wire: HvacWire) -> Tristate:
        return self.wires[HvacWire(wire)]

    def sync_wires(self, query: Callable[[HvacWire], Tristate]) -> None:
        """Replace the cached wire table with what *query* reports per wire."""
        self.wires = [Tristate(query(wire)) for wire in HvacWire]

    def known_wires(self) -> Iterator[tuple[HvacWire, bool]]:
        """Yield (wire, asserted) for every wire with a known state, in enum order."""
        for wire in HvacWire:
            state = self.wires[wire]
            if state != Tristate.UNKNOWN:
                yield wire, state == Tristate.ASSERTED
