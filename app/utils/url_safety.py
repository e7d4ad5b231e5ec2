"""
Outbound URL safety checks

Decides whether a caller-supplied URL may be fetched by the server. Blocks
local hostnames, private and reserved addresses, and hostnames whose DNS
records point at any such address. Every resolved address is checked, not
only the first, so a hostname with one public and one private record is
rejected.
"""
from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from collections.abc import Awaitable, Callable, Sequence
from urllib.parse import SplitResult, urlsplit

from app.exceptions import ForbiddenHostError, InvalidUrlError, UnresolvableHostError


logger = logging.getLogger(__name__)

HostResolver = Callable[[str], Awaitable[list[str]]]

ALLOWED_SCHEMES = ("http", "https")

_PRIVATE_IPV4_NETWORKS = tuple(
    ipaddress.IPv4Network(network)
    for network in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "100.64.0.0/10",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.0.2.0/24",
        "192.168.0.0/16",
        "198.18.0.0/15",
        "198.51.100.0/24",
        "203.0.113.0/24",
        "224.0.0.0/3",  # multicast and reserved, up to 255.255.255.255
    )
)

_PRIVATE_IPV6_NETWORKS = tuple(
    ipaddress.IPv6Network(network)
    for network in (
        "::/128",
        "::1/128",
        "fc00::/7",
        "fe80::/10",
        "2001:db8::/32",
    )
)


def normalize_hostname(hostname: str | None) -> str:
    """Trim, drop a single trailing dot and lowercase."""
    value = str(hostname or "").strip()
    if value.endswith("."):
        value = value[:-1]
    return value.lower()


def is_local_hostname(hostname: str) -> bool:
    return hostname == "localhost" or hostname.endswith(".localhost") or hostname.endswith(".local")


def is_hostname_allowed(hostname: str, allowlist: Sequence[str]) -> bool:
    """
    Check a hostname against an allowlist of domains.

    A hostname matches an entry when it is the entry itself or any subdomain
    of it. Empty entries never match.
    """
    normalized = normalize_hostname(hostname)
    for entry in allowlist:
        allowed = normalize_hostname(entry)
        if not allowed:
            continue
        if normalized == allowed or normalized.endswith(f".{allowed}"):
            return True
    return False


def _parse_ip(address: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(address)
    except ValueError:
        return None


def _is_private_ipv4(address: ipaddress.IPv4Address) -> bool:
    return any(address in network for network in _PRIVATE_IPV4_NETWORKS)


_PRIVATE_IPV6_PREFIXES = ("fc", "fd", "fe80", "2001:db8")


def _has_private_ipv6_prefix(text: str) -> bool:
    return text.lower().startswith(_PRIVATE_IPV6_PREFIXES)


def _is_private_ipv6(address: ipaddress.IPv6Address, raw: str = "") -> bool:
    if address.ipv4_mapped is not None:
        return _is_private_ipv4(address.ipv4_mapped)
    if any(address in network for network in _PRIVATE_IPV6_NETWORKS):
        return True
    # Written forms such as fc::1 or 2001:db80::1 fall outside the networks above
    return _has_private_ipv6_prefix(str(address)) or _has_private_ipv6_prefix(raw)


def is_private_ip(address: str) -> bool:
    """
    Classify an address string as private/reserved.

    Anything that does not parse as an IPv4 or IPv6 address is reported as
    private, so callers fail closed on garbage input.
    """
    candidate = str(address or "").strip()
    if candidate.startswith("[") and candidate.endswith("]"):
        candidate = candidate[1:-1]

    ip = _parse_ip(candidate)
    if ip is None and "%" in candidate:
        # Zone id (fe80::1%eth0)
        ip = _parse_ip(candidate.split("%", 1)[0])
    if ip is None:
        return True

    if isinstance(ip, ipaddress.IPv4Address):
        return _is_private_ipv4(ip)
    return _is_private_ipv6(ip, candidate)


def is_ip_literal(hostname: str) -> bool:
    return _parse_ip(hostname.split("%", 1)[0]) is not None


async def resolve_host_addresses(hostname: str) -> list[str]:
    """Resolve every A/AAAA record for a hostname."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    addresses: list[str] = []
    for info in infos:
        sockaddr = info[4]
        if not sockaddr:
            continue
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


async def _assert_public_hostname(hostname: str, resolver: HostResolver) -> None:
    if is_ip_literal(hostname):
        if is_private_ip(hostname):
            raise ForbiddenHostError("Private IP address is blocked", {"host": hostname})
        return

    try:
        addresses = await resolver(hostname)
    except (OSError, UnicodeError) as exc:
        logger.info(f"DNS resolution failed for {hostname}: {exc}")
        raise UnresolvableHostError("Could not resolve host", {"host": hostname}) from exc

    if not addresses:
        raise UnresolvableHostError("Could not resolve host", {"host": hostname})

    for address in addresses:
        if is_private_ip(address):
            logger.warning(f"Host {hostname} resolves to private address {address}")
            raise ForbiddenHostError(
                "Host resolves to a private IP address",
                {"host": hostname},
            )


async def assert_safe_url(
    url: str,
    allowlist: Sequence[str] | None = None,
    *,
    resolver: HostResolver | None = None,
) -> SplitResult:
    """
    Validate that a URL is safe to fetch from the server.

    Args:
        url: Absolute http(s) URL supplied by a client or a redirect
        allowlist: Optional domains the host must belong to (empty = any public host)

    Keyword Args:
        resolver: Coroutine returning all addresses for a hostname

    Returns:
        The parsed URL

    Raises:
        InvalidUrlError: Unparseable URL, unsupported scheme or missing host
        ForbiddenHostError: Local, private, reserved or non-allowlisted host
        UnresolvableHostError: DNS lookup failed or returned nothing
    """
    try:
        parsed = urlsplit(str(url).strip())
        raw_hostname = parsed.hostname
        parsed.port  # raises ValueError on an out-of-range port
    except ValueError as exc:
        raise InvalidUrlError("Invalid URL") from exc

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError("URL must use http or https")

    hostname = normalize_hostname(raw_hostname)
    if not hostname:
        raise InvalidUrlError("Invalid URL")

    if is_local_hostname(hostname):
        raise ForbiddenHostError("Local host is blocked", {"host": hostname})

    if allowlist and not is_hostname_allowed(hostname, allowlist):
        raise ForbiddenHostError("Host is not allowed", {"host": hostname})

    await _assert_public_hostname(hostname, resolver or resolve_host_addresses)
    return parsed
