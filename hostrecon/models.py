from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class PortStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    FILTERED = "filtered"
    NOT_SCANNED = "not_scanned"


@dataclass(frozen=True)
class ScanRequest:
    target: str
    start_port: int
    end_port: int


@dataclass(frozen=True)
class ResolvedTarget:
    target: str  # as typed by the user
    ip: str
    version: int = 4


@dataclass(frozen=True)
class PortResult:
    port: int
    status: PortStatus
    response_ms: int = 0
    service: Optional[str] = None
    banner: str = ""

    @property
    def is_open(self) -> bool:
        return self.status is PortStatus.OPEN


@dataclass(frozen=True)
class GeoRecord:
    ip: str
    country: str = ""
    region: str = ""
    city: str = ""
    isp: str = ""
    org: str = ""
    lat: float = 0.0
    lon: float = 0.0


@dataclass(frozen=True)
class ScanResult:
    target: str
    ip: str
    ports: Tuple[PortResult, ...] = ()
    geoip: Optional[GeoRecord] = None
    scanned: int = 0
    closed: int = 0
    filtered: int = 0
    not_scanned: int = 0
    timed_out: bool = False
    elapsed_s: float = field(default=0.0, compare=False)

    @property
    def open_ports(self) -> Tuple[int, ...]:
        return tuple(p.port for p in self.ports)


@dataclass(frozen=True)
class Sweep:
    """Raw dispatcher output: one outcome per port, in completion order."""

    outcomes: Tuple[PortResult, ...] = ()
    timed_out: bool = False
    # in flight when the deadline hit; reported filtered, never confirmed
    abandoned: Tuple[int, ...] = ()
