import logging
import socket
import threading
from typing import List, Optional

import pytest

from hostrecon.config import ScanConfig
from hostrecon.logger import LOGGER_NAME
from hostrecon.models import PortResult, PortStatus, ResolvedTarget


class BannerServer:
    """Loopback listener that optionally greets every client with a banner."""

    def __init__(self, banner: Optional[bytes] = None):
        self.banner = banner
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(16)
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self.accepted = 0
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self.accepted += 1
            with conn:
                if self.banner:
                    try:
                        conn.sendall(self.banner)
                    except OSError:
                        pass
                # hold the connection until the client hangs up
                conn.settimeout(1.0)
                try:
                    conn.recv(1)
                except OSError:
                    pass

    def close(self):
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()


@pytest.fixture
def banner_server():
    servers: List[BannerServer] = []

    def factory(banner: Optional[bytes] = None) -> BannerServer:
        s = BannerServer(banner)
        servers.append(s)
        return s

    yield factory
    for s in servers:
        s.close()


@pytest.fixture
def closed_port():
    """A loopback port with no listener behind it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def localhost():
    return ResolvedTarget(target="127.0.0.1", ip="127.0.0.1", version=4)


@pytest.fixture
def fast_config():
    return ScanConfig(connect_timeout=0.5, banner_timeout=0.2, workers=8, deadline=10.0, geoip=False)


def fake_connector(open_ports, delays=None, banners=None):
    """Connector stand-in: ports in open_ports are open, the rest closed."""
    delays = delays or {}
    banners = banners or {}

    def connect(target, port, config):
        delay = delays.get(port)
        if delay:
            threading.Event().wait(delay)
        if port in open_ports:
            return PortResult(port=port, status=PortStatus.OPEN, response_ms=1, banner=banners.get(port, ""))
        return PortResult(port=port, status=PortStatus.CLOSED)

    return connect


@pytest.fixture
def make_connector():
    return fake_connector


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
