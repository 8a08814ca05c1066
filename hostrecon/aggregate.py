from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Optional

from .errors import DuplicateOutcome
from .models import GeoRecord, PortResult, PortStatus, ResolvedTarget, ScanResult
from .services import classify


def collect(outcomes: Iterable[PortResult], ports: range) -> Dict[int, PortResult]:
    """
    Indexes outcomes by port and checks that every port of the range
    produced exactly one outcome. Ports the sweep never reported are
    filled in as not_scanned so the caller always gets a complete map.
    """
    by_port: Dict[int, PortResult] = {}
    for r in outcomes:
        if r.port not in ports:
            raise DuplicateOutcome(f"Outcome for port {r.port} outside {ports.start}-{ports.stop - 1}")
        if r.port in by_port:
            raise DuplicateOutcome(f"Port {r.port} reported twice")
        by_port[r.port] = r

    for p in ports:
        if p not in by_port:
            by_port[p] = PortResult(port=p, status=PortStatus.NOT_SCANNED)
    return by_port


def aggregate(
    target: ResolvedTarget,
    ports: range,
    outcomes: Iterable[PortResult],
    geoip: Optional[GeoRecord] = None,
    timed_out: bool = False,
    elapsed_s: float = 0.0,
    abandoned: Iterable[int] = (),
) -> ScanResult:
    """
    Builds the ScanResult: open ports only, ascending by port number,
    each with its classified service. Ordering depends only on which
    ports are open, never on the order workers finished in.
    Abandoned ports are reported filtered but do not count as scanned.
    """
    by_port = collect(outcomes, ports)
    counts = Counter(r.status for r in by_port.values())
    unconfirmed = len(set(abandoned) & set(by_port))

    open_ports = []
    for port in sorted(by_port):
        r = by_port[port]
        if not r.is_open:
            continue
        if r.service is None:
            r = PortResult(
                port=r.port,
                status=r.status,
                response_ms=r.response_ms,
                service=classify(r.port, r.banner),
                banner=r.banner,
            )
        open_ports.append(r)

    return ScanResult(
        target=target.target,
        ip=target.ip,
        ports=tuple(open_ports),
        geoip=geoip,
        scanned=counts[PortStatus.OPEN] + counts[PortStatus.CLOSED] + counts[PortStatus.FILTERED] - unconfirmed,
        closed=counts[PortStatus.CLOSED],
        filtered=counts[PortStatus.FILTERED],
        not_scanned=counts[PortStatus.NOT_SCANNED],
        timed_out=timed_out or counts[PortStatus.NOT_SCANNED] > 0,
        elapsed_s=round(elapsed_s, 4),
    )
