from __future__ import annotations

import ipaddress
import re
import socket

from .errors import InvalidTarget, ResolutionFailure
from .models import ResolvedTarget

# RFC 1123 labels, dot separated, optional trailing dot
_HOSTNAME = re.compile(
    r"^(?=.{1,253}\.?$)([A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)"
    r"(\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*\.?$"
)


def resolve_target(target: str) -> ResolvedTarget:
    """
    Supports:
      - IPv4 literal: "172.20.0.10"
      - IPv6 literal: "::1" or "[::1]"
      - Hostname: "webapp" (resolves to its first address)
    Networks (CIDR) are rejected; one scan covers exactly one host.
    """
    if target is None:
        raise InvalidTarget("Empty target")
    target = target.strip()
    if not target:
        raise InvalidTarget("Empty target")

    literal = target[1:-1] if target.startswith("[") and target.endswith("]") else target
    try:
        ip = ipaddress.ip_address(literal)
        return ResolvedTarget(target=target, ip=str(ip), version=ip.version)
    except ValueError:
        pass

    if "/" in target:
        raise InvalidTarget(f"Target must be a single host, got network '{target}'")
    if not _HOSTNAME.match(target) or target.replace(".", "").isdigit():
        raise InvalidTarget(f"Malformed target '{target}'")

    # No retries: a failed lookup ends the request
    try:
        infos = socket.getaddrinfo(target, None, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionFailure(f"Could not resolve target '{target}': {e}") from e

    # Prefer IPv4, matching what most ip-geolocation providers key on
    addrs = [info[4][0] for info in infos if info[0] == socket.AF_INET]
    addrs += [info[4][0] for info in infos if info[0] == socket.AF_INET6]
    if not addrs:
        raise ResolutionFailure(f"Could not resolve target '{target}': no address")

    ip = ipaddress.ip_address(addrs[0].split("%", 1)[0])
    return ResolvedTarget(target=target, ip=str(ip), version=ip.version)
