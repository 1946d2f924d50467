"""Custom exception hierarchy for pydavis."""

from __future__ import annotations


class DavisError(Exception):
    """Base exception for all pydavis errors."""


class DavisConfigError(DavisError):
    """Invalid or missing configuration."""


class DavisTransportError(DavisError):
    """HTTP-level failure (network, timeout, non-200)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        route: str = "",
    ) -> None:
        self.status_code = status_code
        self.route = route
        super().__init__(message)


class DavisDecodeError(DavisError):
    """Payload from the unit does not match the expected shape."""


class DavisDeviceError(DavisError):
    """The unit answered with an explicit error object."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class DavisDiscoveryError(DavisError):
    """mDNS lookup failed."""


class DavisSerializationError(DavisError):
    """A serialized report could not be decoded or hashed."""


class DavisNoReportError(DavisError):
    """No weather report has been produced yet."""
