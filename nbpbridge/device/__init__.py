"""Backplate device adapter: serial session, framing and protocol bindings."""

from .frame import Frame, FrameReader
from .protocol import HvacWire, MessageType, Tristate
from .session import BackplateSession, DeviceOpenError, DeviceTransportError

__all__ = [
    "BackplateSession",
    "DeviceOpenError",
    "DeviceTransportError",
    "Frame",
    "FrameReader",
    "HvacWire",
    "MessageType",
    "Tristate",
]
