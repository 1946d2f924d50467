"""pydavis - Async Python client for Davis WeatherLink Live weather telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydavis")
except PackageNotFoundError:
    __version__ = "0+local"
from pydavis._discovery import AddressResolver, Locator, ServiceRecord, UnitAddress, ZeroconfLocator
from pydavis._engine.engine import EngineState
from pydavis.client import DavisClient
from pydavis.config import DavisConfig
from pydavis.exceptions import (
    DavisConfigError,
    DavisDecodeError,
    DavisDeviceError,
    DavisDiscoveryError,
    DavisError,
    DavisNoReportError,
    DavisSerializationError,
    DavisTransportError,
)
from pydavis.models import (
    BatteryState,
    BroadcastConditions,
    CurrentConditions,
    LeaseGrant,
    RecordType,
    Report,
    SignalState,
)
from pydavis.state.store import ReportStore

__all__ = [
    "__version__",
    "AddressResolver",
    "BatteryState",
    "BroadcastConditions",
    "CurrentConditions",
    "DavisClient",
    "DavisConfig",
    "DavisConfigError",
    "DavisDecodeError",
    "DavisDeviceError",
    "DavisDiscoveryError",
    "DavisError",
    "DavisNoReportError",
    "DavisSerializationError",
    "DavisTransportError",
    "EngineState",
    "LeaseGrant",
    "Locator",
    "RecordType",
    "Report",
    "ReportStore",
    "ServiceRecord",
    "SignalState",
    "UnitAddress",
    "ZeroconfLocator",
]
