from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from ipaddress import IPv4Address, IPv6Address

import pytest
from zeroconf import DNSAddress, DNSPointer, DNSService

from pydavis._discovery import AddressResolver, ServiceRecord, UnitAddress, advertised_ttl
from pydavis.config import DavisConfig

UNIT = ServiceRecord(
    instance="weatherlinklive-7a1b._weatherlinklive._tcp.local.",
    host="weatherlinklive-7a1b.local",
    port=80,
    ipv4=("192.168.1.50",),
    ttl=120,
)


class _FakeLocator:
    def __init__(self, *records: ServiceRecord, hang: bool = False) -> None:
        self.records = records
        self.hang = hang
        self.lookups = 0
        self.closed = 0

    async def lookup(
        self,
        instance: str,
        service: str,
        domain: str,
        timeout: float,
    ) -> AsyncGenerator[ServiceRecord, None]:
        self.lookups += 1
        try:
            for record in self.records:
                yield record
            if self.hang:
                await asyncio.Event().wait()
        finally:
            self.closed += 1


# ------------------------------------------------------------------
# UnitAddress
# ------------------------------------------------------------------


class TestUnitAddress:
    def test_ipv4_literal(self) -> None:
        address = UnitAddress.from_host("192.168.1.50", 80)

        assert address.ipv4 == (IPv4Address("192.168.1.50"),)
        assert address.base_url == "http://192.168.1.50:80"

    def test_ipv6_literal_is_bracketed(self) -> None:
        address = UnitAddress.from_host("fe80::1", 8080)

        assert address.host == "[fe80::1]"
        assert address.ipv6 == (IPv6Address("fe80::1"),)
        assert address.base_url == "http://[fe80::1]:8080"

    def test_hostname(self) -> None:
        address = UnitAddress.from_host("weatherlink.lan", 80)

        assert address.ipv4 == ()
        assert address.ipv6 == ()
        assert address.base_url == "http://weatherlink.lan:80"

    def test_empty_host_has_no_url(self) -> None:
        assert UnitAddress(host="", port=80).base_url == ""

    def test_from_service_prefers_ipv6(self) -> None:
        record = ServiceRecord(
            instance="unit",
            host="unit.local",
            port=80,
            ipv4=("10.0.0.2",),
            ipv6=("fd00::2", "not-an-ip"),
        )

        address = UnitAddress.from_service(record)

        assert address.ipv4 == (IPv4Address("10.0.0.2"),)
        assert address.ipv6 == (IPv6Address("fd00::2"),)
        assert address.connection_host == "[fd00::2]"
        assert address.host == "unit.local"


# ------------------------------------------------------------------
# AddressResolver
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_resolve_returns_first_matching_instance() -> None:
    other = ServiceRecord(instance="printer._ipp._tcp.local.", host="printer.local", port=631, ipv4=("10.0.0.9",))
    locator = _FakeLocator(other, UNIT)
    resolver = AddressResolver(DavisConfig(), locator)

    found = await resolver.resolve()

    assert found is not None
    address, interval = found
    assert address.base_url == "http://192.168.1.50:80"
    assert interval == 120.0
    assert locator.closed == 1


@pytest.mark.asyncio
async def test_resolve_without_ttl_uses_discovery_interval() -> None:
    record = ServiceRecord(instance=UNIT.instance, host=UNIT.host, port=80, ipv4=UNIT.ipv4, ttl=0)
    resolver = AddressResolver(DavisConfig(discovery_interval=7.0), _FakeLocator(record))

    found = await resolver.resolve()

    assert found is not None
    assert found[1] == 7.0


@pytest.mark.asyncio
async def test_resolve_times_out_without_a_match() -> None:
    locator = _FakeLocator(hang=True)
    resolver = AddressResolver(DavisConfig(discovery_timeout=0.05), locator)

    assert await resolver.resolve() is None
    assert locator.closed == 1


@pytest.mark.asyncio
async def test_resolve_exhausted_lookup_returns_none() -> None:
    resolver = AddressResolver(DavisConfig(), _FakeLocator())

    assert await resolver.resolve() is None


@pytest.mark.asyncio
async def test_run_publishes_address_before_resolved() -> None:
    resolver = AddressResolver(DavisConfig(), _FakeLocator(UNIT))
    assert resolver.address is None

    task = asyncio.create_task(resolver.run())
    try:
        await asyncio.wait_for(resolver.resolved.wait(), timeout=1.0)
        assert resolver.address is not None
        assert resolver.address.port == 80
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


# ------------------------------------------------------------------
# advertised_ttl
# ------------------------------------------------------------------

_CLASS_IN = 1
_TYPE_A = 1
_TYPE_PTR = 12
_TYPE_SRV = 33


class TestAdvertisedTtl:
    def test_srv_record_ttl_wins(self) -> None:
        records = [
            DNSPointer("_weatherlinklive._tcp.local.", _TYPE_PTR, _CLASS_IN, 4500, UNIT.instance),
            DNSService(UNIT.instance, _TYPE_SRV, _CLASS_IN, 300, 0, 0, 80, "weatherlinklive-7a1b.local."),
            DNSAddress("weatherlinklive-7a1b.local.", _TYPE_A, _CLASS_IN, 60, bytes([192, 168, 1, 50])),
        ]

        assert advertised_ttl(records) == 300

    def test_address_ttl_without_srv(self) -> None:
        records = [
            DNSAddress("weatherlinklive-7a1b.local.", _TYPE_A, _CLASS_IN, 90, bytes([192, 168, 1, 50])),
            DNSAddress("weatherlinklive-7a1b.local.", _TYPE_A, _CLASS_IN, 45, bytes([192, 168, 1, 51])),
        ]

        assert advertised_ttl(records) == 45

    def test_no_records(self) -> None:
        assert advertised_ttl([]) == 0
