"""Nest backplate to ZeroMQ gateway package initialisation."""

__version__ = "1.0.0"

import logging
import sys

logger = logging.getLogger(__name__)


def _check_dependencies():
    """Verify the linked libzmq supports the socket options the gateway needs."""
    try:
        import zmq

        # XPUB_VERBOSE (duplicate subscribe notices) needs libzmq 4.x.
        if zmq.zmq_version_info() < (4, 0):
            logger.critical(
                "FATAL: Incompatible libzmq %s detected. "
                "This gateway requires libzmq >= 4.0 for XPUB_VERBOSE support.",
                zmq.zmq_version(),
            )
            sys.exit(1)

    except ImportError:
        # If imports are missing entirely, Python will raise ImportError naturally later.
        pass


# Run checks on import to ensure fail-fast behavior
_check_dependencies()
