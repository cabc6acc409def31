"""Event-multiplexing dispatcher for the backplate gateway.

One thread, one blocking point: :meth:`Gateway.run_once` polls the backplate
file descriptor, the control socket and the events socket together, bounded
by the periodic scheduler's next deadline. Ready sources are served at most
once per iteration, always in this order:

    1. backplate read (may fire any number of device callbacks)
    2. control request (receive, apply, reply)
    3. events socket subscription notice

Architecture:
    Gateway
        ├── ReadinessGate (waiting_for_reset -> operating)
        ├── PeriodicScheduler (REQ_PERIODIC every interval once armed)
        ├── EventTranslator (+ DeviceState)
        ├── ControlRequestHandler
        └── SubscriptionHandler
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import NoReturn, Protocol

import zmq

from ..bus.endpoints import BusEndpoints
from ..bus.messages import Event
from ..config.settings import RuntimeConfig
from ..device.protocol import HvacWire, MessageType, Tristate
from ..state.context import DeviceState
from ..util import timeout_ms
from .control import ControlRequestHandler
from .gate import ReadinessGate
from .scheduler import PeriodicScheduler
from .subscription import SubscriptionHandler
from .translator import EventTranslator

logger = logging.getLogger("nbpbridge.service.gateway")

Clock = Callable[[], float]


class GatewayStartupError(RuntimeError):
    """Raised when the backplate cannot be brought up."""


class DeviceAdapter(Protocol):
    on_message: Callable[[int, bytes], None] | None
    on_log: Callable[[str], None] | None
    on_weather: Callable[[int, int], None] | None
    on_power_status: Callable[..., None] | None
    on_reset_complete: Callable[[int], None] | None
    on_wire_assertion_changed: Callable[[HvacWire, bool], None] | None

    def open(self) -> None: ...

    def close(self) -> None: ...

    def fileno(self) -> int: ...

    def send(self, message_type: int, payload: bytes = b"") -> bool: ...

    def read_available(self) -> None: ...

    def control_set(self, wire: HvacWire, connect: bool) -> bool: ...

    def wire_assertion(self, wire: HvacWire) -> Tristate: ...


class Gateway:
    """Bridges one backplate session to the control and event endpoints."""

    def __init__(
        self,
        config: RuntimeConfig,
        device: DeviceAdapter,
        bus: BusEndpoints,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config
        self.device = device
        self.bus = bus
        self._clock = clock

        self.state = DeviceState()
        self.translator = EventTranslator(self.state, device.wire_assertion)
        self.scheduler = PeriodicScheduler(self._request_periodic, config.periodic_interval)
        self.gate = ReadinessGate(
            disarm=self._disarm_reset_hook,
            arm_scheduler=self._arm_scheduler,
            bind_events=bus.bind_events,
        )
        self.control = ControlRequestHandler(bus, device.control_set)
        self.subscriptions = SubscriptionHandler(self.translator, self.publish)

        self._poller = zmq.Poller()
        self._device_fd: int | None = None
        self.iterations = 0
        self.idle_wakes = 0
        self.events_published = 0

        self._install_device_callbacks()

    def _install_device_callbacks(self) -> None:
        device = self.device
        device.on_log = self.translator.log
        device.on_weather = self._on_weather
        device.on_power_status = self._on_power_status
        device.on_reset_complete = self.gate.confirm_reset
        device.on_wire_assertion_changed = self._on_wire_assertion_changed
        if self.config.debug_frames:
            device.on_message = self._on_raw_message

    # --- Lifecycle ---

    def start(self) -> None:
        """Open the backplate, request its reset and bind the control endpoint."""
        self.device.open()
        if not self.device.send(MessageType.RESET):
            raise GatewayStartupError("Backplate reset request failed to send")
        logger.info("Backplate reset requested; events endpoint held until reset completes")

        self.bus.bind_control()

        self._device_fd = self.device.fileno()
        self._poller.register(self._device_fd, zmq.POLLIN)
        self._poller.register(self.bus.control, zmq.POLLIN)
        self._poller.register(self.bus.events, zmq.POLLIN)

    def run(self) -> NoReturn:
        self.start()
        while True:
            self.run_once()

    def close(self) -> None:
        self.device.close()
        self.bus.close()

    # --- Dispatch ---

    def run_once(self) -> bool:
        """Run one dispatcher iteration; return False on a spurious wake."""
        now = self._clock()
        wait = self.scheduler.maybe_trigger(now)
        ready = dict(self._poller.poll(timeout_ms(wait)))
        self.iterations += 1

        if not ready:
            self.idle_wakes += 1
            return False

        if ready.get(self._device_fd, 0) & zmq.POLLIN:
            self.device.read_available()
        if ready.get(self.bus.control, 0) & zmq.POLLIN:
            self.control.handle()
        if ready.get(self.bus.events, 0) & zmq.POLLIN:
            self.subscriptions.handle_notice(self.bus.receive_notice())
        return True

    def publish(self, event: Event) -> None:
        if not self.gate.is_open:
            logger.debug("Backplate reset pending; event not published")
            return
        self.bus.send_event(event)
        self.events_published += 1

    # --- Gate hooks ---

    def _disarm_reset_hook(self) -> None:
        self.device.on_reset_complete = None

    def _arm_scheduler(self) -> None:
        self.scheduler.arm(self._clock())

    def _request_periodic(self) -> bool:
        return self.device.send(MessageType.REQ_PERIODIC)

    # --- Device callbacks ---

    def _on_weather(self, temperature: int, humidity: int) -> None:
        self.publish(self.translator.weather(temperature, humidity))

    def _on_power_status(
        self,
        *,
        flags: int,
        vb_mv: int,
        vi_cv: int | None = None,
        vo_mv: int | None = None,
        **_raw: int,
    ) -> None:
        self.publish(self.translator.power_status(flags, vb_mv, vi_cv=vi_cv, vo_mv=vo_mv))

    def _on_wire_assertion_changed(self, wire: HvacWire, connected: bool) -> None:
        self.publish(self.translator.wire_assertion_changed(wire, connected))

    def _on_raw_message(self, message_type: int, payload: bytes) -> None:
        logger.debug(
            "Backplate frame 0x%04X (%d bytes)",
            message_type,
            len(payload),
            extra={"frame_type": message_type, "frame_payload": payload},
        )
