"""Periodic telemetry refresh scheduling."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..const import DEFAULT_PERIODIC_INTERVAL

logger = logging.getLogger("nbpbridge.service.scheduler")

SendRequestCallable = Callable[[], bool]


class PeriodicScheduler:
    """Single-deadline scheduler driven by the dispatcher's clock.

    Unarmed, the deadline is ``None``: it never fires and imposes no wait
    bound. The deadline is written only here.
    """

    def __init__(self, send_request: SendRequestCallable, interval: float = DEFAULT_PERIODIC_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._send_request = send_request
        self.interval = interval
        self.deadline: float | None = None
        self.requests_sent = 0
        self.requests_failed = 0

    @property
    def armed(self) -> bool:
        return self.deadline is not None

    def arm(self, now: float) -> None:
        """Arm the scheduler; the first request goes out immediately."""
        if self.armed:
            return
        self._fire(now)

    def maybe_trigger(self, now: float) -> float | None:
        """Fire if due and return the seconds until the next deadline."""
        if self.deadline is None:
            return None
        if now >= self.deadline:
            self._fire(now)
            return self.interval
        return self.deadline - now

    def _fire(self, now: float) -> None:
        self.deadline = now + self.interval
        if self._send_request():
            self.requests_sent += 1
            logger.debug("Periodic data request")
        else:
            self.requests_failed += 1
            logger.warning("Periodic data request failed to send; next attempt in %.1fs", self.interval)
