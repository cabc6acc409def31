#!/usr/bin/env python3
"""Entry point for the backplate gateway daemon.

Loads the configuration for one device identity, configures logging, then
hands control to :class:`~nbpbridge.services.gateway.Gateway` for the rest of
the process lifetime.

Fatal conditions (transport open failure, reset send failure, bind failure,
malformed control request, lost transport, bad configuration) end the process
with exit status 1; an external supervisor is expected to restart it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

import zmq

from nbpbridge import __version__
from nbpbridge.bus.endpoints import BusEndpoints
from nbpbridge.config.logging import configure_logging
from nbpbridge.config.settings import ConfigError, RuntimeConfig, load_runtime_config
from nbpbridge.const import DEFAULT_CONFIG_PATH, DEFAULT_DEVICE_ID
from nbpbridge.device.session import BackplateSession
from nbpbridge.services.gateway import Gateway

logger = logging.getLogger("nbpbridge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nbpbridge",
        description="Bridge a Nest backplate to ZeroMQ control and event endpoints.",
    )
    parser.add_argument(
        "device_id",
        nargs="?",
        default=DEFAULT_DEVICE_ID,
        help="Device identity used to look up configuration (default: %(default)s)",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the TOML configuration file (default: %(default)s)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def create_gateway(config: RuntimeConfig) -> Gateway:
    device = BackplateSession(config.backplate_device, baudrate=config.backplate_baud)
    bus = BusEndpoints(config)
    return Gateway(config, device, bus)


def main(argv: Sequence[str] | None = None) -> NoReturn:
    args = build_parser().parse_args(argv)

    try:
        config = load_runtime_config(args.device_id, args.config, debug=args.debug)
    except ConfigError as exc:
        logging.basicConfig()
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)

    configure_logging(config)
    logger.info(
        "Starting backplate gateway '%s'. Backplate: %s@%d Control: %s Events: %s",
        config.device_id,
        config.backplate_device,
        config.backplate_baud,
        config.control_endpoint,
        config.events_endpoint,
    )

    gateway = create_gateway(config)
    try:
        gateway.run()
    except KeyboardInterrupt:
        logger.info("Gateway interrupted by user.")
        sys.exit(0)
    except RuntimeError as exc:
        logger.critical("Fatal gateway error: %s", exc)
        sys.exit(1)
    except zmq.ZMQError as exc:
        logger.critical("Message bus error: %s", exc)
        sys.exit(1)
    except OSError as exc:
        logger.critical("System/OS error during gateway execution: %s", exc, exc_info=True)
        sys.exit(1)
    finally:
        gateway.close()
        logger.info("Backplate gateway stopped.")


if __name__ == "__main__":
    main()
