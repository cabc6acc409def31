"""Snapshot publishing for new event subscribers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..bus.messages import Event
from ..const import XPUB_UNSUBSCRIBE
from .translator import EventTranslator

logger = logging.getLogger("nbpbridge.service.subscription")


class SubscriptionHandler:
    """React to XPUB subscribe notices with a full-state snapshot.

    The snapshot goes out on the fan-out socket, so every attached subscriber
    receives it, not only the one that just joined.
    """

    def __init__(self, translator: EventTranslator, publish: Callable[[Event], None]) -> None:
        self._translator = translator
        self._publish = publish
        self.snapshots_sent = 0

    def handle_notice(self, notice: bytes) -> bool:
        if not notice:
            return False
        if notice[0] == XPUB_UNSUBSCRIBE:
            logger.debug("Subscriber left (topic=%r)", bytes(notice[1:]))
            return False

        logger.info("New subscriber (topic=%r); publishing snapshot", bytes(notice[1:]))
        self._publish(self._translator.snapshot())
        self.snapshots_sent += 1
        return True
