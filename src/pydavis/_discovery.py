"""mDNS discovery of the WeatherLink Live unit.

:class:`AddressResolver` runs a lookup against a :class:`Locator` on an
adaptive interval: once the unit answers, the next lookup waits for the
advertised record TTL, so a renumbered unit is picked up without a restart.
"""

from __future__ import annotations

import asyncio
import contextlib
import ipaddress
import logging
from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address
from typing import Protocol

from zeroconf import DNSAddress, DNSRecord, DNSService, IPVersion, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from pydavis.config import DavisConfig
from pydavis.exceptions import DavisDiscoveryError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceRecord:
    """A resolved DNS-SD service instance."""

    instance: str
    host: str
    port: int
    ipv4: tuple[str, ...] = ()
    ipv6: tuple[str, ...] = ()
    ttl: int = 0


@dataclass(frozen=True)
class UnitAddress:
    """Network location of a unit.

    ``host`` is a hostname, an IPv4 literal or a bracketed IPv6 literal.
    """

    host: str
    port: int
    ipv4: tuple[IPv4Address, ...] = ()
    ipv6: tuple[IPv6Address, ...] = ()

    @classmethod
    def from_host(cls, host: str, port: int) -> UnitAddress:
        """Build an address from a user supplied hostname or IP literal."""
        try:
            ip = ipaddress.ip_address(host.strip("[]"))
        except ValueError:
            return cls(host=host, port=port)
        if isinstance(ip, IPv4Address):
            return cls(host=host, port=port, ipv4=(ip,))
        return cls(host=f"[{ip}]", port=port, ipv6=(ip,))

    @classmethod
    def from_service(cls, record: ServiceRecord) -> UnitAddress:
        """Build an address from a discovered service record."""
        ipv4: list[IPv4Address] = []
        ipv6: list[IPv6Address] = []
        for raw in (*record.ipv4, *record.ipv6):
            try:
                ip = ipaddress.ip_address(raw)
            except ValueError:
                continue
            if isinstance(ip, IPv4Address):
                ipv4.append(ip)
            else:
                ipv6.append(ip)
        return cls(host=record.host, port=record.port, ipv4=tuple(ipv4), ipv6=tuple(ipv6))

    @property
    def connection_host(self) -> str:
        """Host part of the URL: IPv6 first, then IPv4, then the hostname."""
        if self.ipv6:
            return f"[{self.ipv6[0]}]"
        if self.ipv4:
            return str(self.ipv4[0])
        return self.host

    @property
    def base_url(self) -> str:
        """``http://host:port`` for the unit, or ``""`` without any host."""
        host = self.connection_host
        if not host:
            return ""
        return f"http://{host}:{self.port}"


class Locator(Protocol):
    """Service discovery collaborator."""

    def lookup(
        self,
        instance: str,
        service: str,
        domain: str,
        timeout: float,
    ) -> AsyncGenerator[ServiceRecord, None]:
        ...


def advertised_ttl(records: Iterable[DNSRecord]) -> int:
    """Lifetime in seconds the unit advertised for its records.

    The SRV record's TTL wins; without one, the shortest A/AAAA TTL is used.
    Returns ``0`` when neither was received.
    """
    received = list(records)
    service_ttls = [record.ttl for record in received if isinstance(record, DNSService)]
    if service_ttls:
        return min(service_ttls)
    address_ttls = [record.ttl for record in received if isinstance(record, DNSAddress)]
    return min(address_ttls, default=0)


class ZeroconfLocator:
    """Locator backed by python-zeroconf.

    Browses ``<instance>.<service><domain>`` (``_weatherlinklive._tcp.local.``)
    and yields each instance as soon as its SRV/A/AAAA records resolve.
    """

    async def lookup(
        self,
        instance: str,
        service: str,
        domain: str,
        timeout: float,
    ) -> AsyncGenerator[ServiceRecord, None]:
        service_type = f"{instance}.{service}{domain}"
        names: asyncio.Queue[str] = asyncio.Queue()

        def on_service_state_change(
            zeroconf: Zeroconf,
            service_type: str,
            name: str,
            state_change: ServiceStateChange,
        ) -> None:
            if state_change in (ServiceStateChange.Added, ServiceStateChange.Updated):
                names.put_nowait(name)

        try:
            aiozc = AsyncZeroconf()
        except OSError as exc:
            raise DavisDiscoveryError(f"Failed to open mDNS socket: {exc}") from exc

        browser = AsyncServiceBrowser(aiozc.zeroconf, service_type, handlers=[on_service_state_change])
        try:
            while True:
                name = await names.get()
                info = AsyncServiceInfo(service_type, name)
                if not await info.async_request(aiozc.zeroconf, int(timeout * 1000)):
                    continue
                yield ServiceRecord(
                    instance=name,
                    host=(info.server or "").rstrip("."),
                    port=info.port or 0,
                    ipv4=tuple(info.parsed_addresses(IPVersion.V4Only)),
                    ipv6=tuple(info.parsed_addresses(IPVersion.V6Only)),
                    ttl=advertised_ttl(
                        (
                            *aiozc.zeroconf.cache.async_entries_with_name(name),
                            *aiozc.zeroconf.cache.async_entries_with_name(info.server or ""),
                        )
                    ),
                )
        finally:
            await browser.async_cancel()
            await aiozc.async_close()


class AddressResolver:
    """Periodically locates the unit and publishes its address.

    ``address`` is written before ``resolved`` is set, so anything waiting
    on ``resolved`` sees the address. Only this class writes ``address``.
    """

    def __init__(
        self,
        config: DavisConfig,
        locator: Locator,
        *,
        log_level: int = logging.DEBUG,
    ) -> None:
        self._config = config
        self._locator = locator
        self._log_level = log_level
        self.address: UnitAddress | None = None
        self.resolved = asyncio.Event()

    async def resolve(self) -> tuple[UnitAddress, float] | None:
        """Run one bounded lookup.

        Returns the unit address and the interval until the next lookup, or
        ``None`` if the unit did not answer before the deadline.
        """
        config = self._config
        loop = asyncio.get_running_loop()
        start = loop.time()
        try:
            async with asyncio.timeout(config.discovery_timeout):
                async with contextlib.aclosing(
                    self._locator.lookup(
                        config.discovery_instance,
                        config.discovery_service,
                        config.discovery_domain,
                        config.discovery_timeout,
                    )
                ) as records:
                    async for record in records:
                        if config.discovery_instance not in record.instance:
                            continue
                        address = UnitAddress.from_service(record)
                        interval = float(record.ttl) if record.ttl > 0 else config.discovery_interval
                        _logger.log(
                            self._log_level,
                            "found WeatherLink Live unit in %.2fs at %s:%d",
                            loop.time() - start,
                            address.connection_host,
                            address.port,
                        )
                        return address, interval
        except TimeoutError:
            return None
        except OSError as exc:
            raise DavisDiscoveryError(f"mDNS lookup failed: {exc}") from exc
        return None

    async def run(self) -> None:
        """Resolve forever; runs until cancelled."""
        interval = self._config.discovery_interval
        try:
            while True:
                _logger.log(self._log_level, "performing autodiscovery of WeatherLink Live unit")
                try:
                    found = await self.resolve()
                except DavisDiscoveryError as exc:
                    _logger.log(self._log_level, "autodiscovery error: %s", exc)
                    found = None

                if found is None:
                    interval = self._config.discovery_interval
                    recover = interval / 2
                    _logger.log(self._log_level, "failed to perform autodiscovery, retrying in %.1fs", recover)
                    await asyncio.sleep(recover)
                    continue

                self.address, interval = found
                self.resolved.set()
                _logger.log(self._log_level, "reperforming autodiscovery in %.0fs", interval)
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            _logger.log(self._log_level, "terminating discovery loop")
            raise
