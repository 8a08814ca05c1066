class ReconError(Exception):
    """Base class for every error raised by hostrecon."""


class ConfigError(ReconError, ValueError):
    pass


class InvalidTarget(ReconError, ValueError):
    pass


class ResolutionFailure(InvalidTarget):
    pass


class InvalidRange(ReconError, ValueError):
    pass


class ConnectorTimeout(ReconError):
    """A single port did not finish its handshake in time. Never fatal."""

    def __init__(self, port: int, timeout_s: float):
        super().__init__(f"port {port}: no handshake within {timeout_s:.3f}s")
        self.port = port
        self.timeout_s = timeout_s


class GeoLookupUnavailable(ReconError):
    pass


class NoResultAvailable(ReconError, LookupError):
    def __init__(self, message: str = "No scan result available"):
        super().__init__(message)


class DuplicateOutcome(ReconError):
    pass
