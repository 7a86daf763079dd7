"""TCP port availability check.

The check binds a listening socket and closes it straight away. It is
advisory only: another process can grab the port right after the check.
"""

import logging
import socket
import sys

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - probing all interfaces is the point


def is_port_available(port: int, host: str = DEFAULT_HOST) -> bool:
    """Return True if a TCP listener could be bound to ``host:port``.

    Args:
        port: Port number to check
        host: Interface address (default: all interfaces)

    Returns:
        True if the bind succeeded, False otherwise (including invalid ports)
    """
    if not 0 <= port <= 65535:
        return False

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        if sys.platform != "win32":
            # Ignore TIME_WAIT leftovers; a live listener still blocks the bind
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen(1)
        except (OSError, OverflowError) as e:
            logger.debug(f"Port {port} unavailable on {host}: {e}")
            return False
    return True
