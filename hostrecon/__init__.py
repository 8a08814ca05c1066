"""hostrecon: TCP connect scanner with banner capture, service
classification and GeoIP enrichment."""

from .config import ScanConfig
from .errors import (
    GeoLookupUnavailable,
    InvalidRange,
    InvalidTarget,
    NoResultAvailable,
    ResolutionFailure,
)
from .models import GeoRecord, PortResult, PortStatus, ScanRequest, ScanResult
from .session import ScanSession

__version__ = "1.0.0"
