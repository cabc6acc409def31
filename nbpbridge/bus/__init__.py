"""Message bus adapter: ZeroMQ endpoints and the message codec."""

from .endpoints import BusBindError, BusEndpoints
from .messages import (
    Battery,
    ControlProtocolError,
    ControlReply,
    ControlRequest,
    Event,
    Weather,
    WireChange,
    WireCommand,
)

__all__ = [
    "Battery",
    "BusBindError",
    "BusEndpoints",
    "ControlProtocolError",
    "ControlReply",
    "ControlRequest",
    "Event",
    "Weather",
    "WireChange",
    "WireCommand",
]
