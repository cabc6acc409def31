"""General-purpose utilities for the backplate gateway."""

from __future__ import annotations

import logging
import math

__all__ = [
    "log_hexdump",
    "timeout_ms",
]


def log_hexdump(logger_instance: logging.Logger, level: int, label: str, data: bytes) -> None:
    """Log binary data in hexadecimal format using syslog-friendly output.

    Format: [HEXDUMP] %s: %s
    """
    if not logger_instance.isEnabledFor(level):
        return

    hex_str = data.hex(" ").upper()
    logger_instance.log(level, "[HEXDUMP] %s: %s", label, hex_str)


def timeout_ms(seconds: float | None) -> int | None:
    """Convert a wait bound in seconds to a poll timeout in milliseconds.

    ``None`` means block indefinitely. Rounds up so a poll never wakes before
    the deadline it was computed from.
    """
    if seconds is None:
        return None
    return max(0, math.ceil(seconds * 1000.0))
