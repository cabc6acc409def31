"""Control endpoint request handling."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from ..bus.messages import ControlReply, ControlRequest
from ..device.protocol import HvacWire

logger = logging.getLogger("nbpbridge.service.control")

ControlSetCallable = Callable[[HvacWire, bool], bool]


class ControlChannel(Protocol):
    def receive_request(self) -> ControlRequest: ...

    def send_reply(self, reply: ControlReply) -> None: ...


class ControlRequestHandler:
    """Apply a batch of wire commands and reply with per-command outcomes.

    Reply index ``i`` always reports command ``i``. A failing command is
    reported as ``False``; it never aborts the rest of the batch.
    """

    def __init__(self, channel: ControlChannel, control_set: ControlSetCallable) -> None:
        self._channel = channel
        self._control_set = control_set

    def apply(self, request: ControlRequest) -> ControlReply:
        outcomes: list[bool] = []
        for command in request.set_hvac_wire:
            accepted = bool(self._control_set(command.wire, command.connect))
            if not accepted:
                logger.info("Wire command %s connect=%d rejected", command.wire.name, int(command.connect))
            outcomes.append(accepted)
        return ControlReply(set_hvac_wire_success=outcomes)

    def handle(self) -> ControlReply:
        """Receive one request, apply it and send the reply.

        ``ControlProtocolError`` from decoding propagates to the caller.
        """
        request = self._channel.receive_request()
        reply = self.apply(request)
        self._channel.send_reply(reply)
        return reply
