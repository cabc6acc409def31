"""Tests for subscription notice handling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from nbpbridge.bus.messages import Event, Weather
from nbpbridge.services.subscription import SubscriptionHandler
from nbpbridge.services.translator import EventTranslator
from nbpbridge.state.context import DeviceState


@pytest.fixture
def publish() -> MagicMock:
    return MagicMock()


@pytest.fixture
def handler(publish: MagicMock) -> SubscriptionHandler:
    state = DeviceState()
    state.record_weather(2150, 450)
    return SubscriptionHandler(EventTranslator(state), publish)


@pytest.mark.parametrize("notice", [b"\x01", b"\x01weather", b"\x02"])
def test_subscribe_publishes_snapshot(handler: SubscriptionHandler, publish: MagicMock, notice: bytes) -> None:
    assert handler.handle_notice(notice)

    publish.assert_called_once_with(Event(weather=Weather(temperature=2150, humidity=450)))
    assert handler.snapshots_sent == 1


@pytest.mark.parametrize("notice", [b"", b"\x00", b"\x00weather"])
def test_other_notices_are_ignored(handler: SubscriptionHandler, publish: MagicMock, notice: bytes) -> None:
    assert not handler.handle_notice(notice)

    publish.assert_not_called()
    assert handler.snapshots_sent == 0
