"""Process-lifetime state for the backplate gateway."""

from .context import DeviceState

__all__ = ["DeviceState"]
