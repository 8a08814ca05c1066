from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .aggregate import aggregate
from .config import ScanConfig
from .errors import NoResultAvailable
from .geoip import GeoLocator
from .logger import get_logger, log_event
from .models import ScanRequest, ScanResult
from .output import export
from .ports import validate_range
from .scanner import Connector, scan
from .targets import resolve_target

logger = get_logger()


class ScanSession:
    """
    Owns the "last scan result" for one user/session.

    The result is replaced as a whole when a scan completes, so a reader
    (an export) sees either the previous result or the new one.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        geolocator: Optional[GeoLocator] = None,
        connector: Optional[Connector] = None,
    ):
        self.config = (config or ScanConfig()).validate()
        self.geolocator = geolocator
        self.connector = connector
        self._lock = threading.Lock()
        self._last: Optional[ScanResult] = None

    def _locator(self) -> GeoLocator:
        if self.geolocator is None:
            self.geolocator = GeoLocator(timeout=self.config.geoip_timeout)
        return self.geolocator

    def run(self, request: ScanRequest) -> ScanResult:
        # Validation happens before any network activity
        ports = validate_range(request.start_port, request.end_port, self.config.max_ports)
        target = resolve_target(request.target)

        log_event(logger, "scan_started", {
            "target": target.target,
            "ip": target.ip,
            "start": ports.start,
            "end": ports.stop - 1,
            "workers": self.config.workers,
        })

        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="hostrecon-geoip") as geo_pool:
            geo_future = geo_pool.submit(self._locator().try_locate, target.ip) if self.config.geoip else None
            sweep = scan(target, ports, self.config, connector=self.connector)
            geo = geo_future.result() if geo_future else None

        result = aggregate(
            target,
            ports,
            sweep.outcomes,
            geoip=geo,
            timed_out=sweep.timed_out,
            elapsed_s=time.perf_counter() - start,
            abandoned=sweep.abandoned,
        )

        with self._lock:
            self._last = result

        log_event(logger, "scan_complete", {
            "target": result.target,
            "ip": result.ip,
            "open_ports": list(result.open_ports),
            "scanned": result.scanned,
            "filtered": result.filtered,
            "not_scanned": result.not_scanned,
            "timed_out": result.timed_out,
            "geoip": result.geoip is not None,
            "elapsed_s": result.elapsed_s,
        })
        return result

    @property
    def last_result(self) -> Optional[ScanResult]:
        with self._lock:
            return self._last

    def require_result(self) -> ScanResult:
        result = self.last_result
        if result is None:
            raise NoResultAvailable()
        return result

    def export(self, fmt: str) -> str:
        result = self.require_result()
        content = export(result, fmt)
        log_event(logger, "export", {"format": fmt, "target": result.target, "ports": len(result.ports)})
        return content
