"""UDP broadcast conditions and the broadcast lease response."""

from __future__ import annotations

from pydantic import Field

from pydavis.models._base import DavisBaseModel, DavisTimestamp, DeviceError


class BroadcastEntry(DavisBaseModel):
    """A single condition entry of a UDP broadcast."""

    lsid: int | None = None
    data_structure_type: int | None = None
    txid: int | None = None

    wind_speed_last: float | None = None
    wind_dir_last: float | None = None

    rain_size: float | None = None
    rain_rate_last: float | None = None
    rain_last_15min: float | None = Field(default=None, alias="rain_15_min")
    rain_last_60min: float | None = Field(default=None, alias="rain_60_min")
    rain_last_24hr: float | None = Field(default=None, alias="rain_24_hr")
    rain_storm: float | None = None
    rain_storm_start: DavisTimestamp = Field(default=None, alias="rain_storm_start_at")

    rain_daily: float | None = Field(default=None, alias="rainfall_daily")
    rain_monthly: float | None = Field(default=None, alias="rainfall_monthly")
    rain_year: float | None = Field(default=None, alias="rainfall_year")

    wind_gust_speed_10min: float | None = Field(default=None, alias="wind_speed_hi_last_10_min")
    wind_gust_dir_10min: float | None = Field(default=None, alias="wind_dir_at_hi_speed_last_10_min")


class BroadcastConditions(DavisBaseModel):
    """A UDP broadcast datagram."""

    device_id: str = Field(default="", alias="did")
    timestamp: DavisTimestamp = Field(default=None, alias="ts")
    conditions: list[BroadcastEntry] = Field(default_factory=list)


class LeaseGrant(DavisBaseModel):
    """UDP broadcast parameters granted by the unit."""

    port: int = Field(default=0, alias="broadcast_port")
    duration: int = 0


class LeaseResponse(DavisBaseModel):
    """Envelope of ``/v1/real_time``."""

    data: LeaseGrant | None = None
    error: DeviceError | None = None
