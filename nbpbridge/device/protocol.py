"""Backplate serial protocol bindings.

Frame structure (on wire):
    [Sync (3 bytes)] [Header (4 bytes)] [Payload (0-255 bytes)] [CRC16 (2 bytes)]

Header format (little-endian):
    - message_type (2 bytes): One of :class:`MessageType`
    - payload_len (2 bytes): Number of payload bytes

The CRC is CRC-16/CCITT (polynomial 0x1021, initial value 0xFFFF) over the
header and payload, transmitted little-endian.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from construct import (  # type: ignore
    Bytes,
    Const,
    Flag,
    Int8ul,
    Int16ul,
    Struct as BinStruct,
    this,
)

FRAME_SYNC: Final[bytes] = b"\xd5\xaa\x96"
SYNC_SIZE: Final[int] = len(FRAME_SYNC)
MAX_PAYLOAD_SIZE: Final[int] = 255
CRC_INITIAL: Final[int] = 0xFFFF
UINT16_MAX: Final[int] = 0xFFFF


class MessageType(IntEnum):
    LOG = 0x0001
    WEATHER = 0x0002
    FET_PRESENCE = 0x0004
    POWER_STATUS = 0x000B
    FET_CONTROL = 0x0082
    REQ_PERIODIC = 0x0083
    FET_PRESENCE_ACK = 0x008F
    RESET = 0x00FF


class HvacWire(IntEnum):
    """FET-switched HVAC wires, in backplate FET order."""

    W1 = 0
    Y1 = 1
    G = 2
    OB = 3
    W2 = 4
    Y2 = 5
    STAR = 6


WIRE_COUNT: Final[int] = len(HvacWire)


class Tristate(IntEnum):
    UNKNOWN = -1
    DEASSERTED = 0
    ASSERTED = 1

    @classmethod
    def from_bool(cls, value: bool) -> "Tristate":
        return cls.ASSERTED if value else cls.DEASSERTED


HEADER_STRUCT: Final = BinStruct(
    "message_type" / Int16ul,
    "payload_len" / Int16ul,
)
HEADER_SIZE: Final[int] = HEADER_STRUCT.sizeof()  # type: ignore

CRC_STRUCT: Final = Int16ul
CRC_SIZE: Final[int] = CRC_STRUCT.sizeof()  # type: ignore

FRAME_STRUCT: Final = BinStruct(
    "sync" / Const(FRAME_SYNC),
    "header" / HEADER_STRUCT,
    "payload" / Bytes(this.header.payload_len),
    "crc" / CRC_STRUCT,
)

MIN_FRAME_SIZE: Final[int] = SYNC_SIZE + HEADER_SIZE + CRC_SIZE

# --- Payload schemas ---

WEATHER_STRUCT: Final = BinStruct(
    "temperature" / Int16ul,
    "humidity" / Int16ul,
)

FET_PRESENCE_STRUCT: Final = BinStruct(
    "presence_mask" / Int16ul,
)

POWER_STATUS_STRUCT: Final = BinStruct(
    "state" / Int8ul,
    "flags" / Int8ul,
    "px0" / Int8ul,
    "u1" / Int16ul,
    "u2" / Int8ul,
    "u3" / Int16ul,
    "vi_cv" / Int16ul,
    "vo_mv" / Int16ul,
    "vb_mv" / Int16ul,
    "pins" / Int8ul,
    "wires" / Int8ul,
)

FET_CONTROL_STRUCT: Final = BinStruct(
    "wire" / Int8ul,
    "connect" / Flag,
)


__all__ = [
    "CRC_INITIAL",
    "CRC_SIZE",
    "CRC_STRUCT",
    "FET_CONTROL_STRUCT",
    "FET_PRESENCE_STRUCT",
    "FRAME_STRUCT",
    "FRAME_SYNC",
    "HEADER_SIZE",
    "HEADER_STRUCT",
    "HvacWire",
    "MAX_PAYLOAD_SIZE",
    "MIN_FRAME_SIZE",
    "MessageType",
    "POWER_STATUS_STRUCT",
    "SYNC_SIZE",
    "Tristate",
    "UINT16_MAX",
    "WEATHER_STRUCT",
    "WIRE_COUNT",
]
