from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import (
    DEFAULT_BANNER_BYTES,
    DEFAULT_BANNER_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DEADLINE,
    DEFAULT_MAX_PORTS,
    DEFAULT_WORKERS,
    ScanConfig,
)
from .errors import ConfigError, InvalidRange, InvalidTarget, NoResultAvailable
from .logger import create_logger
from .models import ScanRequest
from .output import EXPORT_FORMATS, print_results, save_results, to_legacy, to_response
from .ports import parse_range
from .session import ScanSession


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="TCP connect scan with banner grab and GeoIP enrichment")
    p.add_argument("--target", required=True, help="IP or hostname")
    p.add_argument("--ports", default="1-1024", help="Port range: 1-1024 or 22 (default: 1-1024)")
    p.add_argument("--workers", type=int, default=DEFAULT_WORKERS,
                   help=f"Worker pool size (default: {DEFAULT_WORKERS})")
    p.add_argument("--connect-timeout", type=float, default=DEFAULT_CONNECT_TIMEOUT,
                   help=f"Connect timeout seconds (default: {DEFAULT_CONNECT_TIMEOUT})")
    p.add_argument("--banner-timeout", type=float,
                   help="Banner read timeout seconds, at most the connect timeout "
                        f"(default: {DEFAULT_BANNER_TIMEOUT}, capped at --connect-timeout)")
    p.add_argument("--banner-bytes", type=int, default=DEFAULT_BANNER_BYTES,
                   help=f"Max banner bytes (default: {DEFAULT_BANNER_BYTES})")
    p.add_argument("--deadline", type=float, default=DEFAULT_DEADLINE,
                   help=f"Overall scan deadline seconds (default: {DEFAULT_DEADLINE})")
    p.add_argument("--max-ports", type=int, default=DEFAULT_MAX_PORTS,
                   help=f"Largest permitted range width (default: {DEFAULT_MAX_PORTS})")
    p.add_argument("--no-geoip", action="store_true", help="Skip GeoIP enrichment")
    p.add_argument("--json", action="store_true", help="Print the scan response as JSON")
    p.add_argument("--legacy", action="store_true", help="Print only {open_ports: [...]} as JSON")
    p.add_argument("--format", choices=EXPORT_FORMATS, help="Save the export to a file")
    p.add_argument("--out-dir", default="SCANS", help="Output directory for saved files")
    p.add_argument("--log-file", help="Also write JSON log events to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-port outcomes")
    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.INFO
    if args.json or args.legacy:
        level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    create_logger(level, args.log_file)

    try:
        config = ScanConfig().with_overrides(
            connect_timeout=args.connect_timeout,
            banner_timeout=args.banner_timeout,
            banner_bytes=args.banner_bytes,
            workers=args.workers,
            deadline=args.deadline,
            max_ports=args.max_ports,
            geoip=not args.no_geoip,
        )
        start, end = parse_range(args.ports)
        session = ScanSession(config)
        result = session.run(ScanRequest(target=args.target, start_port=start, end_port=end))
    except (ConfigError, InvalidTarget, InvalidRange) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.legacy:
        print(json.dumps(to_legacy(result)))
    elif args.json:
        print(json.dumps(to_response(result), indent=2, ensure_ascii=False))
    else:
        print_results(result)

    if args.format:
        try:
            path = save_results(session.require_result(), fmt=args.format, out_dir=args.out_dir)
        except NoResultAvailable as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        print(f"Saved results to {path}", file=sys.stderr if args.json or args.legacy else sys.stdout)

    return 0
