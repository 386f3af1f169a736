"""
URL validation and SSRF prevention utilities.

This module provides deterministic, I/O-free URL validation to ensure:
1. Only http/https schemes are allowed
2. Private, reserved and loopback addresses are rejected, including
   octal/hex/decimal encoded IPv4 hosts and bracketed IPv6 literals
3. URLs are normalized consistently before fetching

Any parse failure is treated as unsafe.
"""

import ipaddress
import re
from dataclasses import dataclass
from urllib.parse import urlparse, urlunparse
from typing import Optional, Tuple, Union


ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

# Private, reserved and special-purpose IPv4 ranges
PRIVATE_IPV4_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),  # Link-local
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("100.64.0.0/10"),   # CGNAT
    ipaddress.ip_network("192.0.0.0/24"),
    ipaddress.ip_network("192.88.99.0/24"),  # 6to4 relay
    ipaddress.ip_network("198.18.0.0/15"),   # Benchmarking
    ipaddress.ip_network("224.0.0.0/4"),     # Multicast
]

PRIVATE_IPV6_NETWORKS = [
    ipaddress.ip_network("::1/128"),          # IPv6 loopback
    ipaddress.ip_network("::/128"),           # Unspecified
    ipaddress.ip_network("fc00::/7"),         # Unique local
    ipaddress.ip_network("fe80::/10"),        # IPv6 link-local
]

# Patterns that indicate localhost or internal hostnames
LOCALHOST_PATTERNS = [
    "localhost",
    "localhost.localdomain",
    "127.0.0.1",
    "::1",
]

# Dotted four-part IPv4 with decimal, octal (0-prefix) or hex (0x-prefix) octets
_DOTTED_IPV4 = re.compile(r"^(0x[0-9a-f]+|\d+)\.(0x[0-9a-f]+|\d+)\.(0x[0-9a-f]+|\d+)\.(0x[0-9a-f]+|\d+)$")
_DECIMAL_IPV4 = re.compile(r"^\d+$")


@dataclass(frozen=True)
class SafetyVerdict:
    """Outcome of a URL safety check. Computed fresh per call, never stored."""
    allowed: bool
    reason: Optional[str] = None


def _parse_octet(part: str) -> int:
    if part.startswith("0x"):
        value = int(part[2:], 16)
    elif len(part) > 1 and part.startswith("0"):
        value = int(part, 8)
    else:
        value = int(part, 10)
    if not 0 <= value <= 255:
        raise ValueError(f"Octet out of range: {part}")
    return value


def parse_ipv4_host(hostname: str) -> Optional[ipaddress.IPv4Address]:
    """
    Normalize an IPv4-looking hostname to an address.

    Handles dotted four-part forms with per-octet octal or hex encoding
    (``0177.0.0.1``, ``0x7f.0.0.1``) and the pure-decimal 32-bit form
    (``2130706433``).

    Args:
        hostname: Lowercased hostname without brackets

    Returns:
        IPv4Address, or None if the hostname does not look like IPv4

    Raises:
        ValueError: If the hostname looks like IPv4 but cannot be decoded
    """
    match = _DOTTED_IPV4.match(hostname)
    if match:
        octets = [_parse_octet(part) for part in match.groups()]
        return ipaddress.IPv4Address(bytes(octets))

    if _DECIMAL_IPV4.match(hostname):
        value = int(hostname, 10)
        if value > 0xFFFFFFFF:
            raise ValueError(f"Decimal address out of range: {hostname}")
        return ipaddress.IPv4Address(value)

    return None


def is_private_ipv4(address: Union[str, ipaddress.IPv4Address]) -> bool:
    """Check an IPv4 address against the private/reserved ranges."""
    ip = ipaddress.IPv4Address(address) if isinstance(address, str) else address
    return any(ip in network for network in PRIVATE_IPV4_NETWORKS)


def is_private_ipv6(address: ipaddress.IPv6Address) -> bool:
    """Check an IPv6 address, including IPv4-mapped forms like ``::ffff:10.0.0.1``."""
    if address.ipv4_mapped is not None:
        return is_private_ipv4(address.ipv4_mapped)
    return any(address in network for network in PRIVATE_IPV6_NETWORKS)


def is_localhost(hostname: str) -> bool:
    """
    Check if hostname refers to localhost.

    Args:
        hostname: Hostname to check

    Returns:
        True if hostname is localhost variant
    """
    hostname_lower = hostname.lower().strip()

    if hostname_lower in LOCALHOST_PATTERNS:
        return True

    # Check for localhost subdomains
    if hostname_lower.endswith(".localhost"):
        return True

    return False


def check_hostname(hostname: str) -> SafetyVerdict:
    """
    Check if a hostname is safe from SSRF attacks.

    DNS resolution is NOT performed here; see utils.dns_guard for the
    resolving counterpart.

    Args:
        hostname: Hostname or IP literal (IPv6 without brackets)

    Returns:
        SafetyVerdict with a reason when not allowed
    """
    if not hostname:
        return SafetyVerdict(False, "Empty hostname")

    hostname = hostname.strip().lower()

    if is_localhost(hostname):
        return SafetyVerdict(False, "Localhost URLs are not allowed")

    # IPv6 literal (urlparse strips the brackets)
    if ":" in hostname:
        try:
            ipv6 = ipaddress.IPv6Address(hostname)
        except ValueError:
            return SafetyVerdict(False, f"Malformed IPv6 address: {hostname}")
        if is_private_ipv6(ipv6):
            return SafetyVerdict(False, f"Private IP addresses are not allowed: {hostname}")
        return SafetyVerdict(True)

    try:
        ipv4 = parse_ipv4_host(hostname)
    except ValueError:
        return SafetyVerdict(False, f"Malformed IP address: {hostname}")

    if ipv4 is not None and is_private_ipv4(ipv4):
        return SafetyVerdict(False, f"Private IP addresses are not allowed: {hostname}")

    return SafetyVerdict(True)


def check_url(url: str) -> SafetyVerdict:
    """
    Structural safety check for an absolute URL.

    Args:
        url: Absolute URL string

    Returns:
        SafetyVerdict; any parse failure is not allowed
    """
    if not url:
        return SafetyVerdict(False, "URL is required")

    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
        parsed.port  # Raises ValueError on malformed ports
    except ValueError as e:
        return SafetyVerdict(False, f"Invalid URL format: {e}")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return SafetyVerdict(
            False, f"Invalid scheme: {parsed.scheme or 'none'}. Only http and https are allowed"
        )

    if not hostname:
        return SafetyVerdict(False, "URL must have a valid hostname")

    return check_hostname(hostname)


def is_safe_url(url: str) -> bool:
    """True when the URL passes every structural SSRF check."""
    return check_url(url).allowed


def validate_url(url: str) -> Tuple[bool, str, Optional[str]]:
    """
    Validate a user-supplied URL for analysis.

    Performs the following checks:
    1. Adds https:// when no scheme is given
    2. Validates scheme (http/https only)
    3. Ensures hostname is present
    4. Checks for SSRF safety

    Args:
        url: URL string to validate

    Returns:
        Tuple of (is_valid, normalized_url_or_original, error_message)
        If valid, returns (True, normalized_url, warning_or_None)
        If invalid, returns (False, original_url, error_message)
    """
    if not url or not url.strip():
        return False, url, "URL is required"

    url = url.strip()

    if "://" not in url:
        url = f"https://{url}"

    verdict = check_url(url)
    if not verdict.allowed:
        return False, url, verdict.reason

    normalized = normalize_url(urlparse(url))

    # Generate warning for HTTP
    warning = None
    if normalized.startswith("http://"):
        warning = "HTTP URL detected. HTTPS is recommended for security."

    return True, normalized, warning


def normalize_url(parsed) -> str:
    """
    Normalize a parsed URL.

    Normalization rules:
    1. Lowercase scheme and hostname
    2. Remove default ports (80 for http, 443 for https)
    3. Remove trailing slash from path (a bare "/" becomes empty)
    4. Drop credentials and fragment

    Args:
        parsed: ParseResult from urlparse

    Returns:
        Normalized URL string
    """
    scheme = parsed.scheme.lower()
    hostname = parsed.hostname.lower() if parsed.hostname else ""
    if ":" in hostname:
        hostname = f"[{hostname}]"

    # Handle port
    port = parsed.port
    if port:
        # Remove default ports
        if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
            port = None

    netloc = hostname
    if port:
        netloc = f"{hostname}:{port}"

    # Normalize path
    path = parsed.path.rstrip("/")

    return urlunparse((
        scheme,
        netloc,
        path,
        "",  # params
        parsed.query,
        "",  # fragment
    ))


def origin_url(url: str, path: str = "/") -> str:
    """
    Build a URL for a well-known path on the same origin.

    Example:
        >>> origin_url("https://example.com/blog/post", "/robots.txt")
        'https://example.com/robots.txt'
    """
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}{path}"


def host_key(url: str) -> Optional[Tuple[str, Optional[int]]]:
    """
    Identify the host a URL points at, for same-host comparisons.

    Hostname case is ignored and a port equal to the scheme's default is
    dropped, so "https://Example.com:443/a" and "http://example.com/b" share
    the key ("example.com", None).

    Returns:
        (hostname, explicit non-default port or None), or None if the URL
        has no usable host
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return None
    if not parsed.hostname:
        return None
    if port == DEFAULT_PORTS.get(parsed.scheme.lower()):
        port = None
    return parsed.hostname.lower(), port
