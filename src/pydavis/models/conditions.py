"""Current conditions retrieved over HTTP.

``/v1/current_conditions`` returns a list of records whose shape depends on
``data_structure_type``. The three supported shapes form a tagged union;
records with any other discriminator are dropped before validation so a
single unfamiliar sensor does not fail the whole batch.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, Field

from pydavis.models._base import DavisBaseModel, DavisEnum, DavisTimestamp, DeviceError


class RecordType(DavisEnum):
    """Data structure type of a condition record."""

    UNKNOWN = -1
    SENSOR_SUITE = 1
    BAROMETER = 3
    INDOOR = 4


class SignalState(DavisEnum):
    """Receiver lock state on the integrated sensor suite (ISS)."""

    UNKNOWN = -1
    SYNCED = 0
    RESCAN = 1
    LOST = 2


class BatteryState(DavisEnum):
    """ISS transmitter battery state."""

    UNKNOWN = -1
    NOMINAL = 0
    WARNING = 1


class SensorSuiteRecord(DavisBaseModel):
    """Conditions from the integrated sensor suite."""

    data_structure_type: Literal[1]
    lsid: int | None = None
    txid: int | None = None

    temperature: float | None = Field(default=None, alias="temp")
    humidity: float | None = Field(default=None, alias="hum")
    dewpoint: float | None = Field(default=None, alias="dew_point")
    wetbulb: float | None = Field(default=None, alias="wet_bulb")
    heat_index: float | None = None
    wind_chill: float | None = None
    thw_index: float | None = None
    thsw_index: float | None = None

    wind_speed_last: float | None = None
    wind_dir_last: float | None = None
    wind_speed_avg_1min: float | None = Field(default=None, alias="wind_speed_avg_last_1_min")
    wind_dir_avg_1min: float | None = Field(default=None, alias="wind_dir_scalar_avg_last_1_min")
    wind_speed_avg_2min: float | None = Field(default=None, alias="wind_speed_avg_last_2_min")
    wind_dir_avg_2min: float | None = Field(default=None, alias="wind_dir_scalar_avg_last_2_min")
    wind_gust_speed_2min: float | None = Field(default=None, alias="wind_speed_hi_last_2_min")
    wind_gust_dir_2min: float | None = Field(default=None, alias="wind_dir_at_hi_speed_last_2_min")
    wind_speed_avg_10min: float | None = Field(default=None, alias="wind_speed_avg_last_10_min")
    wind_dir_avg_10min: float | None = Field(default=None, alias="wind_dir_scalar_avg_last_10_min")
    wind_gust_speed_10min: float | None = Field(default=None, alias="wind_speed_hi_last_10_min")
    wind_gust_dir_10min: float | None = Field(default=None, alias="wind_dir_at_hi_speed_last_10_min")

    rain_size: float | None = None
    rain_rate_last: float | None = None
    rain_rate_high: float | None = Field(default=None, alias="rain_rate_hi")
    rain_last_15min: float | None = Field(default=None, alias="rainfall_last_15_min")
    rain_rate_high_last_15min: float | None = Field(default=None, alias="rain_rate_hi_last_15_min")
    rain_last_60min: float | None = Field(default=None, alias="rainfall_last_60_min")
    rain_last_24hr: float | None = Field(default=None, alias="rainfall_last_24_hr")
    rain_storm: float | None = None
    rain_storm_start: DavisTimestamp = Field(default=None, alias="rain_storm_start_at")

    solar_rad: float | None = None
    uv_index: float | None = None

    rx_state: SignalState | None = None
    trans_battery_flag: BatteryState | None = None

    rain_daily: float | None = Field(default=None, alias="rainfall_daily")
    rain_monthly: float | None = Field(default=None, alias="rainfall_monthly")
    rain_year: float | None = Field(default=None, alias="rainfall_year")
    rain_storm_last: float | None = None
    rain_storm_last_start: DavisTimestamp = Field(default=None, alias="rain_storm_last_start_at")
    rain_storm_last_end: DavisTimestamp = Field(default=None, alias="rain_storm_last_end_at")


class BarometerRecord(DavisBaseModel):
    """Conditions from the unit's internal barometer."""

    data_structure_type: Literal[3]
    lsid: int | None = None

    barometer_sea_level: float | None = Field(default=None, alias="bar_sea_level")
    barometer_trend: float | None = Field(default=None, alias="bar_trend")
    barometer_absolute: float | None = Field(default=None, alias="bar_absolute")


class IndoorRecord(DavisBaseModel):
    """Conditions from the unit's internal temperature/humidity sensor."""

    data_structure_type: Literal[4]
    lsid: int | None = None

    indoor_temperature: float | None = Field(default=None, alias="temp_in")
    indoor_humidity: float | None = Field(default=None, alias="hum_in")
    indoor_dewpoint: float | None = Field(default=None, alias="dew_point_in")
    indoor_heat_index: float | None = Field(default=None, alias="heat_index_in")


ConditionRecord = Annotated[
    SensorSuiteRecord | BarometerRecord | IndoorRecord,
    Field(discriminator="data_structure_type"),
]

_KNOWN_RECORD_TYPES = frozenset({RecordType.SENSOR_SUITE, RecordType.BAROMETER, RecordType.INDOOR})


def _drop_unknown_records(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    kept: list[Any] = []
    for entry in value:
        if isinstance(entry, DavisBaseModel):
            kept.append(entry)
        elif isinstance(entry, dict) and entry.get("data_structure_type") in _KNOWN_RECORD_TYPES:
            kept.append(entry)
    return kept


class ConditionsData(DavisBaseModel):
    """The ``data`` object of a current conditions response."""

    device_id: str = Field(default="", alias="did")
    timestamp: DavisTimestamp = Field(default=None, alias="ts")
    conditions: Annotated[list[ConditionRecord], BeforeValidator(_drop_unknown_records)] = Field(
        default_factory=list
    )


class CurrentConditions(DavisBaseModel):
    """Envelope of ``/v1/current_conditions``."""

    data: ConditionsData | None = None
    error: DeviceError | None = None
