from __future__ import annotations

import csv
import io
import json
import os
import re
from typing import Any, Dict, List, Optional

from .banner import first_line
from .errors import NoResultAvailable
from .models import GeoRecord, PortResult, PortStatus, ScanResult

EXPORT_FORMATS = ("json", "csv")

CSV_HEADER = [
    "Target",
    "Country",
    "Region",
    "City",
    "ISP",
    "Organization",
    "Port",
    "Service",
    "ResponseMs",
    "Banner",
]

_CONTROL = re.compile(r"[\x00-\x1f\x7f\\]")
_ESCAPED = re.compile(r"\\(x[0-9a-fA-F]{2}|[nrt\\])")
_NAMED = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\\": "\\\\"}
_UNNAMED = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\"}


def escape_banner(banner: str) -> str:
    """Backslash-escapes control characters so a banner stays on one CSV line."""
    return _CONTROL.sub(lambda m: _NAMED.get(m.group(0), f"\\x{ord(m.group(0)):02x}"), banner)


def unescape_banner(text: str) -> str:
    def repl(m: "re.Match[str]") -> str:
        tok = m.group(1)
        if tok[0] == "x":
            return chr(int(tok[1:], 16))
        return _UNNAMED[tok]

    return _ESCAPED.sub(repl, text)


# ----------------------------------------------------------------------------
# Response shapes
# ----------------------------------------------------------------------------

def geo_to_dict(geo: GeoRecord) -> Dict[str, Any]:
    return {
        "query": geo.ip,
        "country": geo.country,
        "regionName": geo.region,
        "city": geo.city,
        "isp": geo.isp,
        "org": geo.org,
        "lat": geo.lat,
        "lon": geo.lon,
    }


def port_to_dict(r: PortResult) -> Dict[str, Any]:
    return {
        "port": r.port,
        "service": r.service,
        "response_ms": r.response_ms,
        "banner": r.banner,
    }


def to_response(result: ScanResult) -> Dict[str, Any]:
    """Canonical scan response; geoip is omitted when enrichment failed."""
    payload: Dict[str, Any] = {
        "target": result.target,
        "ports": [port_to_dict(r) for r in result.ports],
    }
    if result.geoip is not None:
        payload["geoip"] = geo_to_dict(result.geoip)
    return payload


def to_legacy(result: ScanResult) -> Dict[str, Any]:
    """Reduced shape: open port numbers only."""
    return {"open_ports": list(result.open_ports)}


# ----------------------------------------------------------------------------
# Exports
# ----------------------------------------------------------------------------

def _require(result: Optional[ScanResult]) -> ScanResult:
    if result is None:
        raise NoResultAvailable()
    return result


def export_json(result: Optional[ScanResult]) -> str:
    result = _require(result)
    payload = {
        "target": result.target,
        "ports": [port_to_dict(r) for r in result.ports],
        "geoip": geo_to_dict(result.geoip) if result.geoip else None,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_csv(result: Optional[ScanResult]) -> str:
    """
    One row per open port. The GeoRecord is repeated on every row
    (empty cells when absent); a result without open ports is header-only.
    """
    result = _require(result)
    geo = result.geoip
    geo_cells = [geo.country, geo.region, geo.city, geo.isp, geo.org] if geo else [""] * 5

    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(CSV_HEADER)
    for r in result.ports:
        w.writerow([
            result.target,
            *geo_cells,
            r.port,
            r.service or "",
            r.response_ms,
            escape_banner(r.banner),
        ])
    return buf.getvalue()


def export(result: Optional[ScanResult], fmt: str) -> str:
    if fmt == "json":
        return export_json(result)
    if fmt == "csv":
        return export_csv(result)
    raise ValueError(f"Unsupported format: {fmt}")


def _port_from_fields(port: Any, service: Any, response_ms: Any, banner: Any) -> PortResult:
    return PortResult(
        port=int(port),
        status=PortStatus.OPEN,
        response_ms=int(response_ms or 0),
        service=service or None,
        banner=banner or "",
    )


def load_json(text: str) -> List[PortResult]:
    """Decodes a JSON export back into its PortResult list."""
    data = json.loads(text)
    return [
        _port_from_fields(p["port"], p.get("service"), p.get("response_ms"), p.get("banner"))
        for p in data.get("ports", [])
    ]


def load_csv(text: str) -> List[PortResult]:
    """Decodes a CSV export back into its PortResult list."""
    rows = csv.DictReader(io.StringIO(text))
    return [
        _port_from_fields(row["Port"], row["Service"], row["ResponseMs"], unescape_banner(row["Banner"]))
        for row in rows
    ]


# ----------------------------------------------------------------------------
# Terminal / file output
# ----------------------------------------------------------------------------

def format_row(r: PortResult) -> str:
    svc = r.service or "unknown"
    banner = first_line(r.banner) or "-"
    return f"Port {r.port}: {r.status.value} ({r.response_ms} ms) | Service: {svc} | Banner: {banner}"


def print_results(result: ScanResult) -> None:
    print(f"Target: {result.target} ({result.ip})")
    if result.geoip:
        g = result.geoip
        print(f"Location: {g.city}, {g.region}, {g.country} | ISP: {g.isp} | Org: {g.org}")
    print(f"Found {len(result.ports)} open ports "
          f"(scanned={result.scanned} closed={result.closed} filtered={result.filtered})")
    if result.timed_out:
        print(f"[!] Scan deadline reached: {result.not_scanned} ports not scanned")

    for r in result.ports:
        print(format_row(r))


def save_results(result: ScanResult, fmt: str, out_dir: str = "SCANS") -> str:
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"scan_result.{fmt}")
    content = export(result, fmt)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(content)
    return path
