"""Readiness gate between backplate reset and event publishing.

The event endpoint stays unbound and the periodic scheduler unarmed until
the backplate reports FET presence after its reset. That transition happens
once per process; later presence reports are ignored by the gate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from transitions import Machine

logger = logging.getLogger("nbpbridge.service.gate")


class ReadinessGate:
    """Two-state machine: ``waiting_for_reset`` -> ``operating``."""

    if TYPE_CHECKING:
        # FSM generated methods and attributes for static analysis
        fsm_state: str
        confirm_reset: Callable[..., bool]

    STATE_WAITING_FOR_RESET = "waiting_for_reset"
    STATE_OPERATING = "operating"

    def __init__(
        self,
        *,
        disarm: Callable[[], None],
        arm_scheduler: Callable[[], None],
        bind_events: Callable[[], None],
    ) -> None:
        self._disarm = disarm
        self._arm_scheduler = arm_scheduler
        self._bind_events = bind_events
        self.presence_mask: int | None = None

        self.state_machine = Machine(
            model=self,
            states=[
                self.STATE_WAITING_FOR_RESET,
                {
                    "name": self.STATE_OPERATING,
                    "on_enter": "_on_fsm_operating",
                },
            ],
            initial=self.STATE_WAITING_FOR_RESET,
            auto_transitions=False,
            ignore_invalid_triggers=True,
            model_attribute="fsm_state",
        )
        self.state_machine.add_transition(
            trigger="confirm_reset",
            source=self.STATE_WAITING_FOR_RESET,
            dest=self.STATE_OPERATING,
        )

    @property
    def is_open(self) -> bool:
        return self.fsm_state == self.STATE_OPERATING

    def _on_fsm_operating(self, presence_mask: int) -> None:
        self.presence_mask = presence_mask
        self._disarm()
        logger.info("Backplate reset complete (FET presence 0x%04X)", presence_mask)
        self._arm_scheduler()
        # BusBindError propagates: the gateway has no use without its publish channel.
        self._bind_events()
