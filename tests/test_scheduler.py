"""Tests for the periodic telemetry scheduler."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from nbpbridge.services.scheduler import PeriodicScheduler


def test_unarmed_scheduler_never_fires() -> None:
    send = MagicMock(return_value=True)
    scheduler = PeriodicScheduler(send, interval=30.0)

    assert scheduler.maybe_trigger(0.0) is None
    assert scheduler.maybe_trigger(1_000_000.0) is None
    send.assert_not_called()
    assert not scheduler.armed


def test_arm_fires_immediately() -> None:
    send = MagicMock(return_value=True)
    scheduler = PeriodicScheduler(send, interval=30.0)

    scheduler.arm(100.0)

    send.assert_called_once_with()
    assert scheduler.deadline == 130.0
    assert scheduler.requests_sent == 1


def test_arm_twice_is_a_no_op() -> None:
    send = MagicMock(return_value=True)
    scheduler = PeriodicScheduler(send, interval=30.0)

    scheduler.arm(100.0)
    scheduler.arm(110.0)

    assert send.call_count == 1
    assert scheduler.deadline == 130.0


def test_cadence() -> None:
    send = MagicMock(return_value=True)
    scheduler = PeriodicScheduler(send, interval=30.0)
    scheduler.arm(100.0)

    assert scheduler.maybe_trigger(110.0) == 20.0
    assert send.call_count == 1

    assert scheduler.maybe_trigger(130.0) == 30.0
    assert send.call_count == 2
    assert scheduler.deadline == 160.0

    # A late wake fires once and re-bases the deadline on the wake time.
    assert scheduler.maybe_trigger(175.0) == 30.0
    assert send.call_count == 3
    assert scheduler.deadline == 205.0


def test_failed_send_still_advances_deadline() -> None:
    send = MagicMock(return_value=False)
    scheduler = PeriodicScheduler(send, interval=30.0)

    scheduler.arm(0.0)
    assert scheduler.maybe_trigger(30.0) == 30.0

    assert scheduler.requests_failed == 2
    assert scheduler.requests_sent == 0
    assert scheduler.deadline == 60.0


@pytest.mark.parametrize("interval", [0, -1.0])
def test_rejects_non_positive_interval(interval: float) -> None:
    with pytest.raises(ValueError):
        PeriodicScheduler(MagicMock(), interval=interval)
