# Local address discovery for the startup banner.
# Created: 2026-10-12

from __future__ import annotations

import logging
import socket

import psutil

logger = logging.getLogger(__name__)


def get_local_ip() -> str:
    """Return the first non-loopback IPv4 address, or ``"localhost"``."""
    try:
        interfaces = psutil.net_if_addrs()
    except OSError:
        logger.debug("Could not enumerate network interfaces", exc_info=True)
        return "localhost"

    for addrs in interfaces.values():
        for addr in addrs:
            if addr.family == socket.AF_INET and not addr.address.startswith("127."):
                return addr.address
    return "localhost"


def banner_url(port: int, host: str = "0.0.0.0") -> str:
    """URL to print at startup for a server bound to *host*:*port*."""
    if host in ("0.0.0.0", ""):
        host = get_local_ip()
    return f"http://{host}:{port}"
