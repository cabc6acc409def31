"""ZeroMQ endpoints exposed by the gateway.

``control`` is a REP socket: strictly one request, then one reply.
``events`` is a verbose XPUB socket: outbound events fan out to every
subscriber, and subscribe/unsubscribe notices arrive on the same socket.
"""

from __future__ import annotations

import logging

import zmq

from ..config.settings import RuntimeConfig
from . import messages
from .messages import ControlReply, ControlRequest, Event

logger = logging.getLogger("nbpbridge.bus")


class BusBindError(RuntimeError):
    """Raised when an endpoint cannot be bound."""


class BusEndpoints:
    """Owns the control and event sockets of one gateway process."""

    def __init__(self, config: RuntimeConfig, context: zmq.Context | None = None) -> None:
        self._config = config
        self._owns_context = context is None
        self.context = context if context is not None else zmq.Context()

        self.control = self.context.socket(zmq.REP)
        self.control.setsockopt(zmq.LINGER, 0)

        self.events = self.context.socket(zmq.XPUB)
        self.events.setsockopt(zmq.LINGER, 0)
        self.events.setsockopt(zmq.XPUB_VERBOSE, 1)

        self.events_bound = False

    def bind_control(self) -> None:
        self._bind(self.control, "control", self._config.control_endpoint)

    def bind_events(self) -> None:
        if self.events_bound:
            return
        self._bind(self.events, "events", self._config.events_endpoint)
        self.events_bound = True

    @staticmethod
    def _bind(socket: zmq.Socket, name: str, endpoint: str) -> None:
        try:
            socket.bind(endpoint)
        except zmq.ZMQError as exc:
            raise BusBindError(f"Unable to bind {name} endpoint {endpoint}: {exc}") from exc
        logger.info("Bound %s endpoint at %s", name, endpoint)

    # --- Control endpoint ---

    def receive_request(self) -> ControlRequest:
        return messages.decode_request(self.control.recv())

    def send_reply(self, reply: ControlReply) -> None:
        self.control.send(messages.encode(reply))

    # --- Event endpoint ---

    def send_event(self, event: Event) -> None:
        self.events.send(messages.encode(event))

    def receive_notice(self) -> bytes:
        return self.events.recv()

    def close(self) -> None:
        self.control.close()
        self.events.close()
        if self._owns_context:
            self.context.term()


__all__ = ["BusBindError", "BusEndpoints"]
