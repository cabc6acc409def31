"""Configuration helpers for the backplate gateway daemon."""

from . import logging, settings  # noqa: F401
from .settings import ConfigError, RuntimeConfig, load_runtime_config

__all__ = ["ConfigError", "RuntimeConfig", "load_runtime_config"]
