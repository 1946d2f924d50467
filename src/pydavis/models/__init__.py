"""Typed models for WeatherLink Live payloads and the consolidated report."""

from pydavis.models._base import DavisBaseModel, DavisEnum, DeviceError
from pydavis.models.broadcast import BroadcastConditions, BroadcastEntry, LeaseGrant, LeaseResponse
from pydavis.models.conditions import (
    BarometerRecord,
    BatteryState,
    ConditionRecord,
    ConditionsData,
    CurrentConditions,
    IndoorRecord,
    RecordType,
    SensorSuiteRecord,
    SignalState,
)
from pydavis.models.report import Report

__all__ = [
    "BarometerRecord",
    "BatteryState",
    "BroadcastConditions",
    "BroadcastEntry",
    "ConditionRecord",
    "ConditionsData",
    "CurrentConditions",
    "DavisBaseModel",
    "DavisEnum",
    "DeviceError",
    "IndoorRecord",
    "LeaseGrant",
    "LeaseResponse",
    "RecordType",
    "Report",
    "SensorSuiteRecord",
    "SignalState",
]
