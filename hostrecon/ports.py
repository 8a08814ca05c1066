from __future__ import annotations

from typing import Tuple

from .config import DEFAULT_MAX_PORTS
from .errors import InvalidRange

MIN_PORT = 1
MAX_PORT = 65535


def validate_range(start: int, end: int, max_ports: int = DEFAULT_MAX_PORTS) -> range:
    """
    Validates an inclusive [start, end] port range and returns it as a
    range object. Raises InvalidRange when a bound is not an integer,
    falls outside 1-65535, start > end, or the width exceeds max_ports.
    """
    for name, value in (("start", start), ("end", end)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRange(f"{name} port must be an integer, got {value!r}")
        if value < MIN_PORT or value > MAX_PORT:
            raise InvalidRange(f"{name} port {value} outside {MIN_PORT}-{MAX_PORT}")

    if start > end:
        raise InvalidRange(f"Invalid port range: {start}-{end} (start > end)")

    width = end - start + 1
    if width > max_ports:
        raise InvalidRange(f"Port range {start}-{end} covers {width} ports; maximum is {max_ports}")

    return range(start, end + 1)


def parse_range(spec: str) -> Tuple[int, int]:
    """
    Parses a CLI port spec into (start, end).
    Supports:
    - Single ports: "80"
    - Ranges: "1-1024"
    Bounds are checked later by validate_range.
    """
    spec = (spec or "").strip()
    if not spec:
        raise InvalidRange("Empty port spec")

    try:
        if "-" in spec:
            start_s, end_s = spec.split("-", 1)
            return int(start_s), int(end_s)
        p = int(spec)
    except ValueError as e:
        raise InvalidRange(f"Invalid port spec: {spec}") from e
    return p, p
