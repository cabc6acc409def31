"""Gateway services: dispatcher, readiness gate, scheduler and handlers."""

from .control import ControlRequestHandler
from .gate import ReadinessGate
from .gateway import Gateway, GatewayStartupError
from .scheduler import PeriodicScheduler
from .subscription import SubscriptionHandler
from .translator import EventTranslator

__all__ = [
    "ControlRequestHandler",
    "EventTranslator",
    "Gateway",
    "GatewayStartupError",
    "PeriodicScheduler",
    "ReadinessGate",
    "SubscriptionHandler",
]
