"""Consolidated weather report.

The JSON aliases are the canonical serialized form of a report. Hashes,
``to_json()`` bytes and compressed snapshots are all computed over
``model_dump_json(by_alias=True)``, so renaming an alias changes every
checksum.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Report(BaseModel):
    """The latest weather report.

    Every measurement is ``None`` until observed. Temperatures are °F,
    wind speeds mph, directions degrees, rain values collector counts,
    barometer readings inches of mercury.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    device_id: str = Field(default="", alias="deviceID")
    timestamp: datetime | None = None

    temperature: float | None = None
    humidity: float | None = None
    dewpoint: float | None = None
    wetbulb: float | None = None
    heat_index: float | None = Field(default=None, alias="heatindex")
    wind_chill: float | None = Field(default=None, alias="windchill")
    thw_index: float | None = Field(default=None, alias="thwIndex")
    thsw_index: float | None = Field(default=None, alias="thswIndex")

    wind_speed_last: float | None = Field(default=None, alias="windSpeedLast")
    wind_dir_last: float | None = Field(default=None, alias="windDirLast")
    wind_speed_avg_1min: float | None = Field(default=None, alias="windSpeedAvg1Min")
    wind_dir_avg_1min: float | None = Field(default=None, alias="windDirAvg1Min")
    wind_speed_avg_2min: float | None = Field(default=None, alias="windSpeedAvg2Min")
    wind_dir_avg_2min: float | None = Field(default=None, alias="windDirAvg2Min")
    wind_gust_speed_2min: float | None = Field(default=None, alias="windGustSpeedLast2Min")
    wind_gust_dir_2min: float | None = Field(default=None, alias="windGustDirLast2Min")
    wind_speed_avg_10min: float | None = Field(default=None, alias="windSpeedAvg10Min")
    wind_dir_avg_10min: float | None = Field(default=None, alias="windDirAvg10Min")
    wind_gust_speed_10min: float | None = Field(default=None, alias="windGustSpeedLast10Min")
    wind_gust_dir_10min: float | None = Field(default=None, alias="windGustDirLast10Min")

    rain_size: float | None = Field(default=None, alias="rainSize")
    """Collector size (1: 0.01 in, 2: 0.2 mm)."""
    rain_rate_last: float | None = Field(default=None, alias="rainRateLast")
    rain_rate_high: float | None = Field(default=None, alias="rainRateHigh")
    rain_last_15min: float | None = Field(default=None, alias="rainLast15Min")
    rain_rate_high_last_15min: float | None = Field(default=None, alias="rainRateHighLast15Min")
    rain_last_60min: float | None = Field(default=None, alias="rainLast60Min")
    rain_last_24hr: float | None = Field(default=None, alias="rainLast24Hour")
    rain_storm: float | None = Field(default=None, alias="rainStorm")
    rain_storm_start: datetime | None = Field(default=None, alias="rainStormStart")

    solar_rad: float | None = Field(default=None, alias="solarRad")
    uv_index: float | None = Field(default=None, alias="uvIndex")

    rx_state: str = Field(default="", alias="signal")
    """``"Synced"``, ``"Rescan"`` or ``"Lost"``; empty until reported."""
    battery_flag: str = Field(default="", alias="battery")
    """``"Nominal"`` or ``"Warning"``; empty until reported."""

    rain_daily: float | None = Field(default=None, alias="rainDaily")
    rain_monthly: float | None = Field(default=None, alias="rainMonthly")
    rain_year: float | None = Field(default=None, alias="rainYear")
    rain_storm_last: float | None = Field(default=None, alias="rainStormLast")
    rain_storm_last_start: datetime | None = Field(default=None, alias="rainStormLastStart")
    rain_storm_last_end: datetime | None = Field(default=None, alias="rainStormLastEnd")

    barometer_sea_level: float | None = Field(default=None, alias="barometerSeaLevel")
    barometer_trend: float | None = Field(default=None, alias="barometerTrend")
    barometer_absolute: float | None = Field(default=None, alias="barometerAbsolute")

    indoor_temperature: float | None = Field(default=None, alias="indoorTemperature")
    indoor_humidity: float | None = Field(default=None, alias="indoorHumidity")
    indoor_dewpoint: float | None = Field(default=None, alias="indoorDewpoint")
    indoor_heat_index: float | None = Field(default=None, alias="indoorHeatIndex")

    @property
    def health_reported(self) -> bool:
        """Whether receiver signal and battery state have been populated."""
        return bool(self.rx_state) and bool(self.battery_flag)

    def canonical_json(self) -> bytes:
        """Canonical serialized form used for hashing and transfer."""
        return self.model_dump_json(by_alias=True).encode("utf-8")


MEASUREMENT_FIELDS: tuple[str, ...] = tuple(
    name for name in Report.model_fields if name not in {"timestamp"}
)
"""Every field replaced by a full-report update (all but ``timestamp``)."""
