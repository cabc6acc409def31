"""Bus message shapes and their MessagePack codec.

Every message travels as a single ZeroMQ frame holding one MessagePack map.
Optional slots are omitted rather than sent as zero values.
"""

from __future__ import annotations

from typing import Annotated

import msgspec

from ..device.protocol import HvacWire

UInt16 = Annotated[int, msgspec.Meta(ge=0, le=0xFFFF)]


class ControlProtocolError(RuntimeError):
    """Raised when a control request cannot be decoded."""


class WireCommand(msgspec.Struct, frozen=True):
    wire: HvacWire
    connect: bool


class ControlRequest(msgspec.Struct, frozen=True, omit_defaults=True):
    set_hvac_wire: list[WireCommand] = []


class ControlReply(msgspec.Struct, frozen=True, omit_defaults=True):
    set_hvac_wire_success: list[bool] = []


class Weather(msgspec.Struct, frozen=True):
    temperature: UInt16
    humidity: UInt16


class Battery(msgspec.Struct, frozen=True):
    charging: bool
    voltage: UInt16


class WireChange(msgspec.Struct, frozen=True):
    wire: HvacWire
    connected: bool


class Event(msgspec.Struct, frozen=True, omit_defaults=True):
    weather: Weather | None = None
    battery: Battery | None = None
    wire_change: list[WireChange] = []


_ENCODER = msgspec.msgpack.Encoder()
_REQUEST_DECODER = msgspec.msgpack.Decoder(ControlRequest)
_REPLY_DECODER = msgspec.msgpack.Decoder(ControlReply)
_EVENT_DECODER = msgspec.msgpack.Decoder(Event)


def encode(message: ControlRequest | ControlReply | Event) -> bytes:
    return _ENCODER.encode(message)


def decode_request(data: bytes) -> ControlRequest:
    try:
        return _REQUEST_DECODER.decode(data)
    except msgspec.DecodeError as exc:
        raise ControlProtocolError(f"Malformed control request: {exc}") from exc


def decode_reply(data: bytes) -> ControlReply:
    return _REPLY_DECODER.decode(data)


def decode_event(data: bytes) -> Event:
    return _EVENT_DECODER.decode(data)


__all__ = [
    "Battery",
    "ControlProtocolError",
    "ControlReply",
    "ControlRequest",
    "Event",
    "Weather",
    "WireChange",
    "WireCommand",
    "decode_event",
    "decode_reply",
    "decode_request",
    "encode",
]
