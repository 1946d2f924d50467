"""Translate decoded condition records into report patches.

A patch is a ``{report_field: value}`` dict. Keys present in a patch
overwrite the report, including with ``None``; that is how a sensor that
stops reporting a value clears it. Storm timestamps and receiver health
are the exception: they are only written when the record carries them.
"""

from __future__ import annotations

from typing import Any

from pydavis.models.broadcast import BroadcastConditions, BroadcastEntry
from pydavis.models.conditions import (
    BarometerRecord,
    BatteryState,
    ConditionsData,
    IndoorRecord,
    SensorSuiteRecord,
    SignalState,
)

SIGNAL_LABELS: dict[SignalState, str] = {
    SignalState.SYNCED: "Synced",
    SignalState.RESCAN: "Rescan",
    SignalState.LOST: "Lost",
}

BATTERY_LABELS: dict[BatteryState, str] = {
    BatteryState.NOMINAL: "Nominal",
    BatteryState.WARNING: "Warning",
}

_SENSOR_SUITE_FIELDS: tuple[str, ...] = (
    "temperature",
    "humidity",
    "dewpoint",
    "wetbulb",
    "heat_index",
    "wind_chill",
    "thw_index",
    "thsw_index",
    "wind_speed_last",
    "wind_dir_last",
    "wind_speed_avg_1min",
    "wind_dir_avg_1min",
    "wind_speed_avg_2min",
    "wind_dir_avg_2min",
    "wind_gust_speed_2min",
    "wind_gust_dir_2min",
    "wind_speed_avg_10min",
    "wind_dir_avg_10min",
    "wind_gust_speed_10min",
    "wind_gust_dir_10min",
    "rain_size",
    "rain_rate_last",
    "rain_rate_high",
    "rain_last_15min",
    "rain_rate_high_last_15min",
    "rain_last_60min",
    "rain_last_24hr",
    "rain_storm",
    "solar_rad",
    "uv_index",
    "rain_daily",
    "rain_monthly",
    "rain_year",
    "rain_storm_last",
)

_SENSOR_SUITE_OPTIONAL_TIMES: tuple[str, ...] = (
    "rain_storm_start",
    "rain_storm_last_start",
    "rain_storm_last_end",
)

_BAROMETER_FIELDS: tuple[str, ...] = (
    "barometer_sea_level",
    "barometer_trend",
    "barometer_absolute",
)

_INDOOR_FIELDS: tuple[str, ...] = (
    "indoor_temperature",
    "indoor_humidity",
    "indoor_dewpoint",
    "indoor_heat_index",
)

_BROADCAST_FIELDS: tuple[str, ...] = (
    "wind_speed_last",
    "wind_dir_last",
    "rain_size",
    "rain_rate_last",
    "rain_last_15min",
    "rain_last_60min",
    "rain_last_24hr",
    "rain_storm",
    "rain_daily",
    "rain_monthly",
    "rain_year",
    "wind_gust_speed_10min",
    "wind_gust_dir_10min",
)


def _pick(model: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    return {name: getattr(model, name) for name in fields}


def sensor_suite_patch(record: SensorSuiteRecord) -> dict[str, Any]:
    """Patch for an integrated sensor suite record."""
    patch = _pick(record, _SENSOR_SUITE_FIELDS)
    for name in _SENSOR_SUITE_OPTIONAL_TIMES:
        value = getattr(record, name)
        if value is not None:
            patch[name] = value

    if record.rx_state is not None:
        label = SIGNAL_LABELS.get(record.rx_state)
        if label is not None:
            patch["rx_state"] = label
    if record.trans_battery_flag is not None:
        label = BATTERY_LABELS.get(record.trans_battery_flag)
        if label is not None:
            patch["battery_flag"] = label
    return patch


def barometer_patch(record: BarometerRecord) -> dict[str, Any]:
    """Patch for a barometer record."""
    return _pick(record, _BAROMETER_FIELDS)


def indoor_patch(record: IndoorRecord) -> dict[str, Any]:
    """Patch for an indoor temperature/humidity record."""
    return _pick(record, _INDOOR_FIELDS)


def pull_patch(data: ConditionsData) -> dict[str, Any]:
    """Combine every record of a conditions response into one patch.

    Records are applied in payload order, so a later record of the same
    category wins.
    """
    patch: dict[str, Any] = {"device_id": data.device_id}
    for record in data.conditions:
        if isinstance(record, SensorSuiteRecord):
            patch.update(sensor_suite_patch(record))
        elif isinstance(record, BarometerRecord):
            patch.update(barometer_patch(record))
        elif isinstance(record, IndoorRecord):
            patch.update(indoor_patch(record))
    return patch


def broadcast_entry_patch(entry: BroadcastEntry) -> dict[str, Any]:
    """Patch for a single UDP broadcast entry."""
    patch = _pick(entry, _BROADCAST_FIELDS)
    if entry.rain_storm_start is not None:
        patch["rain_storm_start"] = entry.rain_storm_start
    return patch


def push_patch(broadcast: BroadcastConditions) -> dict[str, Any]:
    """Combine every entry of a UDP broadcast into one patch."""
    patch: dict[str, Any] = {"device_id": broadcast.device_id}
    for entry in broadcast.conditions:
        patch.update(broadcast_entry_patch(entry))
    return patch
