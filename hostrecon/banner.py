from __future__ import annotations

import socket

from .config import DEFAULT_BANNER_BYTES, DEFAULT_BANNER_TIMEOUT


def _try_recv(sock: socket.socket, n: int = DEFAULT_BANNER_BYTES, timeout: float = DEFAULT_BANNER_TIMEOUT) -> bytes:
    """
    Reads whatever the peer sends unprompted, up to n bytes.
    Silence, a reset, or any other read error yields b"".
    """
    sock.settimeout(timeout)
    try:
        return sock.recv(n)
    except OSError:
        return b""


def decode_banner(data: bytes) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def grab_banner(sock: socket.socket, n: int = DEFAULT_BANNER_BYTES, timeout: float = DEFAULT_BANNER_TIMEOUT) -> str:
    """Called only after connect() succeeds."""
    return decode_banner(_try_recv(sock, n=n, timeout=timeout))


def first_line(banner: str, max_len: int = 120) -> str:
    """Printable first line of a banner, for terminal display."""
    for line in banner.splitlines():
        line = "".join(ch for ch in line if ch.isprintable()).strip()
        if line:
            if len(line) > max_len:
                return line[:max_len] + "..."
            return line
    return ""
