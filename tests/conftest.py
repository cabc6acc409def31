"""Pytest configuration for backplate gateway tests."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator

import pytest
import zmq

from nbpbridge.bus.endpoints import BusEndpoints
from nbpbridge.config.settings import RuntimeConfig
from nbpbridge.services.gateway import Gateway
from tests.mocks import CappedPoll, FakeBackplate, FakeClock


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    """Close and remove all logging handlers after each test to prevent ResourceWarnings."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


@pytest.fixture
def runtime_config() -> RuntimeConfig:
    suffix = uuid.uuid4().hex
    return RuntimeConfig(
        device_id="test",
        backplate_device="/dev/null",
        control_endpoint=f"inproc://control-{suffix}",
        events_endpoint=f"inproc://events-{suffix}",
    )


@pytest.fixture
def zmq_context() -> Iterator[zmq.Context]:
    context = zmq.Context()
    yield context
    context.destroy(linger=0)


@pytest.fixture
def bus(runtime_config: RuntimeConfig, zmq_context: zmq.Context) -> BusEndpoints:
    return BusEndpoints(runtime_config, context=zmq_context)


@pytest.fixture
def device() -> Iterator[FakeBackplate]:
    backplate = FakeBackplate()
    yield backplate
    backplate.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway(
    runtime_config: RuntimeConfig, device: FakeBackplate, bus: BusEndpoints, clock: FakeClock
) -> Iterator[Gateway]:
    gw = Gateway(runtime_config, device, bus, clock=clock)
    CappedPoll(gw._poller)
    gw.start()
    yield gw
    gw.close()


@pytest.fixture
def poll(gateway: Gateway) -> CappedPoll:
    return gateway._poller.poll


@pytest.fixture
def open_gateway(gateway: Gateway, device: FakeBackplate) -> Gateway:
    """A started gateway whose backplate has already confirmed its reset."""
    device.inject("on_reset_complete", 0x007F)
    assert gateway.run_once()
    assert gateway.gate.is_open
    return gateway
