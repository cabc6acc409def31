"""Backplate session over a serial transport.

The session owns the tty, reframes incoming bytes and dispatches each decoded
message to a fixed set of callback slots. Callbacks run synchronously on the
caller's stack (inside :meth:`BackplateSession.read_available` or
:meth:`BackplateSession.control_set`); there is no background reader.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import serial
from construct import ConstructError

from ..util import log_hexdump
from .frame import Frame, FrameReader
from .protocol import (
    FET_CONTROL_STRUCT,
    FET_PRESENCE_STRUCT,
    POWER_STATUS_STRUCT,
    WEATHER_STRUCT,
    WIRE_COUNT,
    HvacWire,
    MessageType,
    Tristate,
)

logger = logging.getLogger("nbpbridge.device")

MessageCallback = Callable[[int, bytes], None]
LogCallback = Callable[[str], None]
WeatherCallback = Callable[[int, int], None]
PowerStatusCallback = Callable[..., None]
ResetCompleteCallback = Callable[[int], None]
WireAssertionCallback = Callable[[HvacWire, bool], None]

SerialFactory = Callable[..., Any]

_READ_CHUNK = 256


class DeviceOpenError(RuntimeError):
    """Raised when the backplate transport cannot be opened."""


class DeviceTransportError(RuntimeError):
    """Raised when the open transport fails; the session cannot recover."""


class BackplateSession:
    """Serial session with a backplate and its callback slots.

    Attributes:
        on_message: Raw (type, payload) hook for every decoded frame.
        on_log: Backplate diagnostic text.
        on_weather: Temperature (centi-degC) and humidity (permille).
        on_power_status: Decoded power status fields as keyword arguments.
        on_reset_complete: FET presence bitmask after a reset.
        on_wire_assertion_changed: Wire and new connect state after a
            successful :meth:`control_set`.
    """

    def __init__(
        self,
        path: str,
        *,
        baudrate: int = 115200,
        serial_factory: SerialFactory = serial.Serial,
    ) -> None:
        self.path = path
        self.baudrate = baudrate
        self._serial_factory = serial_factory
        self._serial: Any = None
        self._reader = FrameReader()
        self._asserted: list[Tristate] = [Tristate.UNKNOWN] * WIRE_COUNT
        self.presence_mask: int | None = None

        self.on_message: MessageCallback | None = None
        self.on_log: LogCallback | None = None
        self.on_weather: WeatherCallback | None = None
        self.on_power_status: PowerStatusCallback | None = None
        self.on_reset_complete: ResetCompleteCallback | None = None
        self.on_wire_assertion_changed: WireAssertionCallback | None = None

    # --- Transport ---

    def open(self) -> None:
        try:
            self._serial = self._serial_factory(self.path, self.baudrate, timeout=0)
        except (serial.SerialException, OSError, ValueError) as exc:
            raise DeviceOpenError(f"Unable to open backplate at {self.path}: {exc}") from exc
        logger.info("Backplate transport opened at %s (%d baud)", self.path, self.baudrate)

    def close(self) -> None:
        if self._serial is None:
            return
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as exc:
            logger.warning("Error closing backplate transport: %s", exc)
        self._serial = None
        self._reader.reset()

    @property
    def is_open(self) -> bool:
        return self._serial is not None

    def fileno(self) -> int:
        if self._serial is None:
            raise DeviceTransportError("Backplate transport is not open")
        return self._serial.fileno()

    def send(self, message_type: int, payload: bytes = b"") -> bool:
        if self._serial is None:
            logger.warning("Backplate not open; dropping message 0x%04X", message_type)
            return False
        try:
            raw = Frame.build(message_type, payload)
        except ValueError as exc:
            logger.error("Refusing to send message 0x%04X: %s", message_type, exc)
            return False
        try:
            written = self._serial.write(raw)
        except (serial.SerialException, OSError) as exc:
            logger.error("Backplate write failed for message 0x%04X: %s", message_type, exc)
            return False
        if written is not None and written != len(raw):
            logger.error("Short backplate write for message 0x%04X (%d/%d)", message_type, written, len(raw))
            return False
        return True

    def read_available(self) -> None:
        """Read buffered bytes and dispatch every complete message."""
        if self._serial is None:
            raise DeviceTransportError("Backplate transport is not open")
        try:
            data = self._serial.read(max(self._serial.in_waiting, _READ_CHUNK))
        except (serial.SerialException, OSError) as exc:
            raise DeviceTransportError(f"Backplate read failed: {exc}") from exc

        for frame in self._reader.feed(data):
            self._dispatch(frame)

    # --- Wire control ---

    def control_set(self, wire: HvacWire, connect: bool) -> bool:
        wire = HvacWire(wire)
        if self.presence_mask is None:
            logger.warning("Refusing to set %s before backplate reset completes", wire.name)
            return False
        if not self.presence_mask & (1 << wire):
            logger.warning("Refusing to set %s: wire not present (mask 0x%04X)", wire.name, self.presence_mask)
            return False

        payload = FET_CONTROL_STRUCT.build({"wire": int(wire), "connect": connect})
        if not self.send(MessageType.FET_CONTROL, payload):
            return False

        self._asserted[wire] = Tristate.from_bool(connect)
        if self.on_wire_assertion_changed is not None:
            self.on_wire_assertion_changed(wire, connect)
        return True

    def wire_assertion(self, wire: HvacWire) -> Tristate:
        return self._asserted[HvacWire(wire)]

    # --- Inbound dispatch ---

    def _dispatch(self, frame: Frame) -> None:
        if self.on_message is not None:
            self.on_message(frame.message_type, frame.payload)

        try:
            message_type = MessageType(frame.message_type)
        except ValueError:
            log_hexdump(logger, logging.DEBUG, f"Unhandled message 0x{frame.message_type:04X}", frame.payload)
            return

        try:
            if message_type == MessageType.LOG:
                self._handle_log(frame.payload)
            elif message_type == MessageType.WEATHER:
                self._handle_weather(frame.payload)
            elif message_type == MessageType.POWER_STATUS:
                self._handle_power_status(frame.payload)
            elif message_type == MessageType.FET_PRESENCE:
                self._handle_fet_presence(frame.payload)
            else:
                log_hexdump(logger, logging.DEBUG, f"Ignored {message_type.name}", frame.payload)
        except ConstructError as exc:
            logger.warning("Malformed %s payload (%d bytes): %s", message_type.name, len(frame.payload), exc)

    def _handle_log(self, payload: bytes) -> None:
        if self.on_log is None:
            return
        text = payload.split(b"\x00", 1)[0].decode("ascii", errors="replace").rstrip()
        self.on_log(text)

    def _handle_weather(self, payload: bytes) -> None:
        parsed = WEATHER_STRUCT.parse(payload)
        if self.on_weather is not None:
            self.on_weather(parsed.temperature, parsed.humidity)

    def _handle_power_status(self, payload: bytes) -> None:
        parsed = POWER_STATUS_STRUCT.parse(payload)
        if self.on_power_status is not None:
            fields = {k: v for k, v in parsed.items() if not k.startswith("_")}
            self.on_power_status(**fields)

    def _handle_fet_presence(self, payload: bytes) -> None:
        parsed = FET_PRESENCE_STRUCT.parse(payload)
        # A presence report follows a backplate reset; prior assertions are void.
        self.presence_mask = parsed.presence_mask
        self._asserted = [Tristate.UNKNOWN] * WIRE_COUNT
        self.send(MessageType.FET_PRESENCE_ACK, payload)
        if self.on_reset_complete is not None:
            self.on_reset_complete(parsed.presence_mask)


__all__ = [
    "BackplateSession",
    "DeviceOpenError",
    "DeviceTransportError",
]
