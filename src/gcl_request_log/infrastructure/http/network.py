# src/gcl_request_log/infrastructure/http/network.py
# Copyright (c) GCL Request Log.
# SPDX-License-Identifier: MIT
"""Host address lookup for the ``serverIp`` access-log field."""

from __future__ import annotations

import ipaddress
import logging
import socket
from functools import lru_cache

__all__ = ["host_ipv4_address"]

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def host_ipv4_address() -> str:
    """Return the first non-loopback IPv4 address of this host, or ``""``.

    The lookup resolves the host name and never opens a connection. The
    result is cached for the life of the process.
    """
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, family=socket.AF_INET)
    except OSError:
        logger.debug("network.host_lookup_failed", exc_info=True)
        return ""
    for *_, sockaddr in infos:
        address = str(sockaddr[0])
        try:
            if not ipaddress.ip_address(address).is_loopback:
                return address
        except ValueError:
            continue
    return ""
