"""Client configuration for pydavis."""

from __future__ import annotations

import dataclasses
import os
from typing import Any


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class DavisConfig:
    """Client configuration.

    Parameters
    ----------
    host : str or None
        Fixed hostname or IP literal of the WeatherLink Live unit. ``None``
        means the unit is located with mDNS (managed client).
    port : int
        HTTP port of the unit. Values ``<= 0`` fall back to ``80``.
    broadcast_port : int
        Known UDP broadcast port. ``0`` means the port is learned from the
        first broadcast lease.
    verbose : bool
        Log engine lifecycle and loop messages at INFO instead of DEBUG.
    poll_interval : float
        Seconds between HTTP condition fetches.
    poll_grace : float
        One-time delay before the first HTTP fetch. The unit cannot serve
        the conditions route and the lease route concurrently, so the first
        lease request is given a head start.
    http_timeout : float
        Per-request HTTP timeout in seconds.
    receive_deadline : float
        Seconds without a UDP broadcast before the lease is renewed. Also
        the per-read deadline on the broadcast socket.
    lease_duration : float
        Requested broadcast lease duration in seconds.
    discovery_instance : str
        mDNS instance substring that identifies the unit.
    discovery_service : str
        mDNS service label.
    discovery_domain : str
        mDNS domain.
    discovery_timeout : float
        Deadline of a single mDNS lookup in seconds.
    discovery_interval : float
        Initial (and fallback) seconds between mDNS lookups. Replaced by the
        advertised record TTL once the unit has been found.
    route_conditions : str
        HTTP route for current conditions.
    route_real_time : str
        HTTP route for enabling UDP broadcasts.
    """

    host: str | None = None
    port: int = 80
    broadcast_port: int = 0
    verbose: bool = False
    poll_interval: float = 10.3
    poll_grace: float = 5.0
    http_timeout: float = 3.0
    receive_deadline: float = 15.0
    lease_duration: float = 4 * 3600
    discovery_instance: str = "_weatherlinklive"
    discovery_service: str = "_tcp."
    discovery_domain: str = "local."
    discovery_timeout: float = 15.0
    discovery_interval: float = 5.0
    route_conditions: str = "/v1/current_conditions"
    route_real_time: str = "/v1/real_time"

    @property
    def watchdog_interval(self) -> float:
        """Seconds between lease watchdog ticks (half the receive deadline)."""
        return self.receive_deadline / 2.0

    @property
    def managed(self) -> bool:
        """Whether the unit is located with mDNS."""
        return self.host is None

    @classmethod
    def from_env(cls, **overrides: Any) -> DavisConfig:
        """Create configuration from environment variables.

        Reads ``DAVIS_HOST``, ``DAVIS_PORT``, ``DAVIS_VERBOSE`` and the
        optional timing variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DavisConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        host = env.get("DAVIS_HOST")
        if host:
            config_kwargs["host"] = host

        _ENV_INT_MAP = {
            "DAVIS_PORT": "port",
            "DAVIS_BROADCAST_PORT": "broadcast_port",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = int(val)

        _ENV_FLOAT_MAP = {
            "DAVIS_POLL_INTERVAL": "poll_interval",
            "DAVIS_HTTP_TIMEOUT": "http_timeout",
            "DAVIS_RECEIVE_DEADLINE": "receive_deadline",
            "DAVIS_LEASE_DURATION": "lease_duration",
            "DAVIS_DISCOVERY_TIMEOUT": "discovery_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = float(val)

        if "verbose" not in overrides:
            config_kwargs["verbose"] = _env_bool(env.get("DAVIS_VERBOSE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
