"""UDP broadcast lease route."""

from __future__ import annotations

from pydavis._discovery import UnitAddress
from pydavis._transport import Transport
from pydavis.config import DavisConfig
from pydavis.decoder import decode_lease_response
from pydavis.models.broadcast import LeaseGrant


def lease_url(config: DavisConfig, address: UnitAddress) -> str:
    return f"{address.base_url}{config.route_real_time}?duration={config.lease_duration:.0f}"


async def request_broadcast_lease(
    config: DavisConfig,
    transport: Transport,
    address: UnitAddress,
) -> LeaseGrant:
    """Ask the unit to broadcast conditions over UDP for ``config.lease_duration`` seconds."""
    body = await transport.get(lease_url(config, address), timeout=config.http_timeout)
    return decode_lease_response(body)
