"""
DNS rebinding guard.

Resolves a hostname that already passed the structural validator and
re-checks the resolved address against the private ranges. Resolution is
bounded by a timeout and fails closed: timeouts, NXDOMAIN and any other
resolver error all count as unsafe.

The guard must run immediately before every outbound request. Results are
never cached, otherwise a hostname could be repointed between the check and
the fetch.
"""

import asyncio
import logging
import socket
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

from utils.url_validator import is_private_ipv4, is_safe_url

logger = logging.getLogger(__name__)

# Async callable mapping a hostname to one IPv4 address string
Resolver = Callable[[str], Awaitable[str]]

DEFAULT_DNS_TIMEOUT_SECONDS = 5.0


async def system_resolver(hostname: str) -> str:
    """Forward A-record lookup through the system resolver (IPv4 only)."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, family=socket.AF_INET, type=socket.SOCK_STREAM)
    if not infos:
        raise socket.gaierror(f"No IPv4 address for {hostname}")
    return infos[0][4][0]


async def resolves_safely(
    hostname: str,
    timeout: float = DEFAULT_DNS_TIMEOUT_SECONDS,
    resolver: Optional[Resolver] = None,
) -> bool:
    """
    Resolve hostname and verify the address is public.

    Args:
        hostname: Hostname to resolve
        timeout: Maximum seconds to wait for resolution
        resolver: Optional resolver override (defaults to the system resolver)

    Returns:
        True only if resolution succeeded within the timeout and the
        address is outside every private/reserved range
    """
    if not hostname:
        return False

    resolve = resolver or system_resolver
    try:
        address = await asyncio.wait_for(resolve(hostname), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"DNS lookup timed out for {hostname}")
        return False
    except Exception as e:
        # NXDOMAIN, SERVFAIL, resolver bugs: all fail closed
        logger.info(f"DNS lookup failed for {hostname}: {e}")
        return False

    try:
        if is_private_ipv4(address):
            logger.warning(f"Blocked DNS rebinding attempt: {hostname} resolved to {address}")
            return False
    except ValueError:
        logger.warning(f"Resolver returned a non-IPv4 address for {hostname}: {address}")
        return False

    return True


async def is_safe_url_with_dns(
    url: str,
    timeout: float = DEFAULT_DNS_TIMEOUT_SECONDS,
    resolver: Optional[Resolver] = None,
) -> bool:
    """
    Combined structural and resolution check.

    Use this instead of is_safe_url() whenever an outbound request follows.
    """
    if not is_safe_url(url):
        return False
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    return await resolves_safely(hostname or "", timeout=timeout, resolver=resolver)
