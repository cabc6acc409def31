"""Frame building and parsing for the backplate serial link.

Each frame starts with a fixed sync sequence so the reader can recover from
line noise by scanning for the next sync header. See
:mod:`nbpbridge.device.protocol` for the layout.
"""

from __future__ import annotations

import logging
from binascii import crc_hqx

import msgspec
from construct import ConstructError

from ..util import log_hexdump
from . import protocol

logger = logging.getLogger("nbpbridge.device.frame")


def crc16_ccitt(data: bytes | bytearray | memoryview) -> int:
    """Compute CRC-16/CCITT with the backplate's initial value."""
    return crc_hqx(data, protocol.CRC_INITIAL)


class Frame(msgspec.Struct, frozen=True, kw_only=True):
    """A single backplate message.

    Attributes:
        message_type: The 16-bit message type (see ``MessageType``).
        payload: The frame payload (0 to MAX_PAYLOAD_SIZE bytes).
    """

    message_type: int
    payload: bytes = b""

    @staticmethod
    def build(message_type: int, payload: bytes = b"") -> bytes:
        """Build a raw frame (sync + header + payload + CRC)."""
        payload_len = len(payload)
        if payload_len > protocol.MAX_PAYLOAD_SIZE:
            raise ValueError(f"Payload too large ({payload_len} bytes); max is {protocol.MAX_PAYLOAD_SIZE}")
        if not 0 <= message_type <= protocol.UINT16_MAX:
            raise ValueError(f"Message type {message_type} outside 16-bit range")

        header = protocol.HEADER_STRUCT.build({"message_type": message_type, "payload_len": payload_len})
        body = header + payload
        return protocol.FRAME_SYNC + body + protocol.CRC_STRUCT.build(crc16_ccitt(body))

    @staticmethod
    def parse(raw_frame: bytes | bytearray | memoryview) -> tuple[int, bytes]:
        """Parse one complete frame and validate sync, length and CRC."""
        data_bytes = bytes(raw_frame)
        total_len = len(data_bytes)

        if total_len < protocol.MIN_FRAME_SIZE:
            raise ValueError(f"Incomplete frame: size {total_len} is less than minimum {protocol.MIN_FRAME_SIZE}")

        try:
            container = protocol.FRAME_STRUCT.parse(data_bytes)
        except ConstructError as e:
            raise ValueError(f"Frame parsing failed: {e}") from e

        payload_len = container.header.payload_len
        if payload_len > protocol.MAX_PAYLOAD_SIZE:
            raise ValueError(f"Payload length {payload_len} exceeds max {protocol.MAX_PAYLOAD_SIZE}")

        expected_size = protocol.MIN_FRAME_SIZE + payload_len
        if total_len != expected_size:
            raise ValueError(f"Frame size mismatch: header says {payload_len} payload bytes, buffer has {total_len}")

        calculated_crc = crc16_ccitt(data_bytes[protocol.SYNC_SIZE : -protocol.CRC_SIZE])
        if container.crc != calculated_crc:
            raise ValueError(f"CRC mismatch: expected 0x{calculated_crc:04X}, got 0x{container.crc:04X}")

        return container.header.message_type, container.payload

    def to_bytes(self) -> bytes:
        return self.build(self.message_type, self.payload)

    @classmethod
    def from_bytes(cls, raw_frame: bytes | bytearray | memoryview) -> "Frame":
        message_type, payload = cls.parse(raw_frame)
        return cls(message_type=message_type, payload=payload)


class FrameReader:
    """Reassemble frames from an arbitrary chunked byte stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.discarded_bytes = 0
        self.decode_errors = 0

    def feed(self, data: bytes) -> list[Frame]:
        """Append *data* and return every complete frame now available."""
        self._buffer.extend(data)
        frames: list[Frame] = []

        while True:
            start = self._buffer.find(protocol.FRAME_SYNC)
            if start < 0:
                # Keep a possible partial sync sequence at the tail.
                keep = protocol.SYNC_SIZE - 1
                if len(self._buffer) > keep:
                    self.discarded_bytes += len(self._buffer) - keep
                    del self._buffer[: len(self._buffer) - keep]
                break
            if start:
                self.discarded_bytes += start
                del self._buffer[:start]

            if len(self._buffer) < protocol.SYNC_SIZE + protocol.HEADER_SIZE:
                break

            header = protocol.HEADER_STRUCT.parse(
                bytes(self._buffer[protocol.SYNC_SIZE : protocol.SYNC_SIZE + protocol.HEADER_SIZE])
            )
            if header.payload_len > protocol.MAX_PAYLOAD_SIZE:
                self._resync()
                continue

            total = protocol.MIN_FRAME_SIZE + header.payload_len
            if len(self._buffer) < total:
                break

            raw = bytes(self._buffer[:total])
            try:
                frame = Frame.from_bytes(raw)
            except ValueError as exc:
                logger.debug("Frame parse error: %s", exc)
                log_hexdump(logger, logging.DEBUG, "Corrupt Frame", raw)
                self._resync()
                continue

            del self._buffer[:total]
            frames.append(frame)

        return frames

    def _resync(self) -> None:
        # Skip this sync sequence; the next find() locates the following one.
        self.decode_errors += 1
        self.discarded_bytes += 1
        del self._buffer[:1]

    def reset(self) -> None:
        self._buffer.clear()
