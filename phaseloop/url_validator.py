"""
Outbound URL checks for user-supplied image URLs.

The preview endpoint downloads whatever URL the editor picked, so the URL
is checked before fetching: only http(s), no internal hostnames, and no
addresses in private, loopback, link-local or otherwise non-public ranges.
"""

import ipaddress
import socket
from urllib.parse import urlparse


class SSRFError(Exception):
    """Raised when a URL points somewhere the server must not fetch."""


ALLOWED_SCHEMES = {"http", "https"}

BLOCKED_HOSTNAMES = {
    "localhost",
    "localhost.localdomain",
    "ip6-localhost",
    "ip6-loopback",
    "metadata",
    "metadata.google.internal",
}

BLOCKED_SUFFIXES = (".local", ".internal", ".localhost")


def is_ip_blocked(ip_str: str) -> bool:
    """True for any address that is not publicly routable."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
        ip = ip.ipv4_mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def validate_url(url: str, resolve_dns: bool = True) -> str:
    """
    Check a URL before fetching it.

    Args:
        url: The URL to check
        resolve_dns: Also resolve the hostname and check every address

    Returns:
        The URL unchanged

    Raises:
        SSRFError: If the URL is malformed or targets a blocked host
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise SSRFError(f"Invalid URL format: {e}")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise SSRFError(f"URL scheme '{parsed.scheme}' is not allowed. Use http or https.")
    if not parsed.hostname:
        raise SSRFError("URL must include a hostname")

    hostname = parsed.hostname.lower().rstrip(".")
    if hostname in BLOCKED_HOSTNAMES or hostname.endswith(BLOCKED_SUFFIXES):
        raise SSRFError(f"Access to '{hostname}' is not allowed")

    try:
        ipaddress.ip_address(hostname)
        is_literal = True
    except ValueError:
        is_literal = False

    if is_literal:
        if is_ip_blocked(hostname):
            raise SSRFError(f"Access to IP address '{hostname}' is not allowed")
        return url

    if resolve_dns:
        try:
            addrinfo = socket.getaddrinfo(hostname, port or 443, proto=socket.IPPROTO_TCP)
        except (socket.gaierror, UnicodeError):
            # Unresolvable hosts fail at fetch time
            return url
        for *_, sockaddr in addrinfo:
            if is_ip_blocked(sockaddr[0]):
                raise SSRFError(f"Hostname '{hostname}' resolves to blocked IP address '{sockaddr[0]}'")

    return url
