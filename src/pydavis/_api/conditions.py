"""Current conditions route."""

from __future__ import annotations

from pydavis._discovery import UnitAddress
from pydavis._transport import Transport
from pydavis.config import DavisConfig
from pydavis.decoder import decode_pull
from pydavis.models.conditions import CurrentConditions


async def fetch_current_conditions(
    config: DavisConfig,
    transport: Transport,
    address: UnitAddress,
) -> CurrentConditions:
    """Fetch and decode the unit's current conditions."""
    url = f"{address.base_url}{config.route_conditions}"
    body = await transport.get(url, timeout=config.http_timeout)
    return decode_pull(body)
