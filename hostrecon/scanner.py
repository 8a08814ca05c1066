from __future__ import annotations

import socket
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional

from .banner import grab_banner
from .config import ScanConfig
from .errors import ConnectorTimeout
from .logger import get_logger, log_event
from .models import PortResult, PortStatus, ResolvedTarget, Sweep
from .services import classify

Connector = Callable[[ResolvedTarget, int, ScanConfig], PortResult]

logger = get_logger()


def _connect(target: ResolvedTarget, port: int, timeout_s: float) -> socket.socket:
    family = socket.AF_INET6 if target.version == 6 else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.settimeout(timeout_s)
    try:
        sock.connect((target.ip, port))
    except socket.timeout as e:
        sock.close()
        raise ConnectorTimeout(port, timeout_s) from e
    except BaseException:
        sock.close()
        raise
    return sock


def scan_one(target: ResolvedTarget, port: int, config: ScanConfig) -> PortResult:
    """
    Connect scan of a single port, followed by a passive banner read.
    Never raises for network conditions: refused -> closed, anything
    that stops the handshake from completing -> filtered.
    """
    start = time.perf_counter()
    try:
        sock = _connect(target, port, config.connect_timeout)
    except ConnectorTimeout:
        logger.debug("port %d filtered (timeout)", port)
        return PortResult(port=port, status=PortStatus.FILTERED)
    except ConnectionRefusedError:
        logger.debug("port %d closed", port)
        return PortResult(port=port, status=PortStatus.CLOSED)
    except OSError as e:
        # unreachable host/network, reset during handshake, ...
        logger.debug("port %d filtered (%s)", port, e)
        return PortResult(port=port, status=PortStatus.FILTERED)

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    with sock:
        banner = grab_banner(sock, n=config.banner_bytes, timeout=config.banner_timeout)

    return PortResult(
        port=port,
        status=PortStatus.OPEN,
        response_ms=elapsed_ms,
        service=classify(port, banner),
        banner=banner,
    )


def _outcome(fut: Future, port: int) -> PortResult:
    try:
        return fut.result()
    except Exception as e:
        # a misbehaving connector must not take the sweep down
        logger.debug("port %d: connector error %r", port, e)
        return PortResult(port=port, status=PortStatus.FILTERED)


def scan(
    target: ResolvedTarget,
    ports: range,
    config: ScanConfig,
    connector: Optional[Connector] = None,
) -> Sweep:
    """
    Bounded-futures sweep: at most config.workers threads and a bounded
    number of queued futures, so a 10k-port range never creates 10k sockets.

    Returns one outcome per port, in completion order.
    When config.deadline elapses, finished attempts keep their outcome,
    attempts still in flight are reported as filtered (and listed as
    abandoned), and ports never started as not_scanned.
    """
    connector = connector or scan_one
    total = len(ports)
    results: List[PortResult] = []

    jobs = iter(ports)
    open_count = 0
    start_all = time.perf_counter()
    deadline_at = start_all + config.deadline
    timed_out = False

    max_pending = max(config.workers * 4, 100)

    pool = ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="hostrecon")
    pending: Dict[Future, int] = {}

    def submit_next() -> bool:
        try:
            p = next(jobs)
        except StopIteration:
            return False
        fut = pool.submit(connector, target, p, config)
        pending[fut] = p
        return True

    def record(r: PortResult) -> None:
        nonlocal open_count
        results.append(r)
        if r.is_open:
            open_count += 1
            log_event(logger, "port_open", {
                "ip": target.ip,
                "port": r.port,
                "service": r.service,
                "response_ms": r.response_ms,
            })

    try:
        # Prime the queue
        while len(pending) < max_pending and submit_next():
            pass

        while pending:
            remaining = deadline_at - time.perf_counter()
            if remaining <= 0:
                timed_out = True
                break

            done, _ = wait(set(pending), timeout=remaining, return_when=FIRST_COMPLETED)
            for fut in done:
                port = pending.pop(fut)
                record(_outcome(fut, port))

                # Refill queue
                while len(pending) < max_pending and submit_next():
                    pass
    finally:
        # Abandoned attempts close their own sockets once Tc expires
        pool.shutdown(wait=not timed_out, cancel_futures=True)

    abandoned: List[int] = []
    if timed_out:
        for fut, port in pending.items():
            if fut.cancelled():
                record(PortResult(port=port, status=PortStatus.NOT_SCANNED))
            elif fut.done():
                # finished before we got to it
                record(_outcome(fut, port))
            else:
                abandoned.append(port)
                record(PortResult(port=port, status=PortStatus.FILTERED))
        unstarted = 0
        for port in jobs:
            record(PortResult(port=port, status=PortStatus.NOT_SCANNED))
            unstarted += 1
        log_event(logger, "scan_deadline", {
            "ip": target.ip,
            "deadline_s": config.deadline,
            "in_flight": len(abandoned),
            "never_queued": unstarted,
        })

    elapsed = time.perf_counter() - start_all
    logger.debug("swept %d/%d ports in %.2fs (open=%d)", len(results), total, elapsed, open_count)
    return Sweep(outcomes=tuple(results), timed_out=timed_out, abandoned=tuple(sorted(abandoned)))
