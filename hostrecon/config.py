from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import ConfigError

DEFAULT_CONNECT_TIMEOUT = 1.0
DEFAULT_BANNER_TIMEOUT = 0.5
DEFAULT_BANNER_BYTES = 256
DEFAULT_WORKERS = 100
DEFAULT_DEADLINE = 30.0
DEFAULT_MAX_PORTS = 10000
DEFAULT_GEOIP_TIMEOUT = 5.0


@dataclass(frozen=True)
class ScanConfig:
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    banner_timeout: float = DEFAULT_BANNER_TIMEOUT
    banner_bytes: int = DEFAULT_BANNER_BYTES
    workers: int = DEFAULT_WORKERS
    deadline: float = DEFAULT_DEADLINE
    max_ports: int = DEFAULT_MAX_PORTS
    geoip: bool = True
    geoip_timeout: float = DEFAULT_GEOIP_TIMEOUT

    def validate(self) -> "ScanConfig":
        for name in ("connect_timeout", "banner_timeout", "deadline", "geoip_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be > 0")
        for name in ("banner_bytes", "workers", "max_ports"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1")
        # the banner read happens inside the connect budget
        if self.banner_timeout > self.connect_timeout:
            raise ConfigError("banner_timeout must not exceed connect_timeout")
        return self

    def with_overrides(self, **kwargs) -> "ScanConfig":
        """
        Return a copy with every non-None keyword applied. Lowering only
        the connect timeout pulls the banner timeout down with it.
        """
        changes = {k: v for k, v in kwargs.items() if v is not None}
        if "connect_timeout" in changes and "banner_timeout" not in changes:
            changes["banner_timeout"] = min(self.banner_timeout, changes["connect_timeout"])
        return replace(self, **changes).validate()
