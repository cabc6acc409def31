"""Logging helpers for the backplate gateway daemon.

Every line is one JSON object tagged with the gateway's device identity, so
several gateways sharing one syslog can be told apart. Raw backplate frames
logged with ``debug_frames`` travel as a bytes ``extra`` and are rendered as
hex by the formatter.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from logging import Handler
from logging.config import dictConfig
from logging.handlers import SysLogHandler
from pathlib import Path
from typing import Any

import msgspec

from ..const import DEFAULT_DEVICE_ID
from .settings import RuntimeConfig

SYSLOG_SOCKET = Path("/dev/log")
SYSLOG_SOCKET_FALLBACK = Path("/var/run/log")
SYSLOG_IDENT = "nbpbridge "
LOG_STREAM_ENV = "NBPBRIDGE_LOG_STREAM"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _serialise_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"[{bytes(value).hex(' ').upper()}]"
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """Emit one JSON object per record, with the package prefix trimmed."""

    PREFIX = "nbpbridge."

    def __init__(self, device_id: str = DEFAULT_DEVICE_ID) -> None:
        super().__init__()
        self.device_id = device_id

    def format(self, record: logging.LogRecord) -> str:
        logger_name = record.name.removeprefix(self.PREFIX)

        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "device": self.device_id,
            "level": record.levelname,
            "logger": logger_name,
            "message": record.getMessage(),
        }

        extras = {
            key: _serialise_value(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            payload["extra"] = extras

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return msgspec.json.encode(payload).decode("utf-8")


def _syslog_address() -> Path | None:
    candidates = [SYSLOG_SOCKET]
    if SYSLOG_SOCKET == Path("/dev/log"):
        candidates.append(SYSLOG_SOCKET_FALLBACK)
    return next((c for c in candidates if c.exists()), None)


def _build_handler() -> Handler:
    address = None if os.environ.get(LOG_STREAM_ENV) else _syslog_address()
    if address is None:
        return logging.StreamHandler()
    handler = SysLogHandler(address=str(address), facility=SysLogHandler.LOG_DAEMON)
    handler.ident = SYSLOG_IDENT
    return handler


def configure_logging(config: RuntimeConfig) -> None:
    """Configure root logging for one gateway identity."""

    debug = config.debug_logging or config.debug_frames
    level_name = "DEBUG" if debug else "INFO"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": StructuredLogFormatter,
                    "device_id": config.device_id,
                }
            },
            "handlers": {
                "nbpbridge": {
                    "()": _build_handler,
                    "level": level_name,
                    "formatter": "structured",
                }
            },
            "root": {
                "level": level_name,
                "handlers": ["nbpbridge"],
            },
        }
    )

    logging.getLogger("nbpbridge").info("Logging configured at level %s for device '%s'", level_name, config.device_id)
