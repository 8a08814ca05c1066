from __future__ import annotations

import ipaddress
from typing import Dict, Optional

import requests

from .config import DEFAULT_GEOIP_TIMEOUT
from .errors import GeoLookupUnavailable
from .logger import get_logger, log_event
from .models import GeoRecord

logger = get_logger()


class GeoLocator:
    """IP geolocation through ip-api.com."""

    API_URL = "http://ip-api.com/json/{ip}"
    FIELDS = "status,message,query,country,regionName,city,isp,org,lat,lon"

    def __init__(self, timeout: float = DEFAULT_GEOIP_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "hostrecon/1.0",
            "Accept": "application/json",
        })

    @staticmethod
    def is_routable(ip: str) -> bool:
        addr = ipaddress.ip_address(ip)
        return not (
            addr.is_private
            or addr.is_loopback
            or addr.is_link_local
            or addr.is_multicast
            or addr.is_reserved
            or addr.is_unspecified
        )

    def locate(self, ip: str) -> GeoRecord:
        """
        Returns the GeoRecord for ip, or raises GeoLookupUnavailable.
        Non-routable addresses are never sent to the provider.
        """
        try:
            routable = self.is_routable(ip)
        except ValueError as e:
            raise GeoLookupUnavailable(f"Not an IP address: {ip!r}") from e
        if not routable:
            raise GeoLookupUnavailable(f"{ip} is not publicly routable")

        try:
            response = self.session.get(
                self.API_URL.format(ip=ip),
                params={"fields": self.FIELDS},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GeoLookupUnavailable(f"GeoIP request failed: {e}") from e

        return self._parse_response(data, ip)

    def _parse_response(self, data: Dict, ip: str) -> GeoRecord:
        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message", "unknown error") if isinstance(data, dict) else "malformed response"
            raise GeoLookupUnavailable(f"GeoIP lookup for {ip} failed: {message}")

        try:
            return GeoRecord(
                ip=data.get("query") or ip,
                country=data.get("country") or "",
                region=data.get("regionName") or "",
                city=data.get("city") or "",
                isp=data.get("isp") or "",
                org=data.get("org") or "",
                lat=float(data.get("lat") or 0.0),
                lon=float(data.get("lon") or 0.0),
            )
        except (TypeError, ValueError) as e:
            raise GeoLookupUnavailable(f"GeoIP response for {ip} malformed: {e}") from e

    def try_locate(self, ip: str) -> Optional[GeoRecord]:
        """Like locate(), but unavailability degrades to None."""
        try:
            return self.locate(ip)
        except GeoLookupUnavailable as e:
            log_event(logger, "geoip_unavailable", {"ip": ip, "reason": str(e)})
            return None
