"""High-level async client for a Davis WeatherLink Live unit."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any

import aiohttp

from pydavis._discovery import AddressResolver, Locator, UnitAddress, ZeroconfLocator
from pydavis._engine.engine import Engine, EngineState
from pydavis._transport import HttpTransport, Transport
from pydavis.config import DavisConfig
from pydavis.exceptions import DavisConfigError, DavisError
from pydavis.models.report import Report
from pydavis.state.store import ReportStore

_logger = logging.getLogger(__name__)

DEFAULT_PORT = 80


class DavisClient:
    """Async client that keeps the latest weather report of one unit.

    Usage::

        async with DavisClient.managed(verbose=True) as client:
            while True:
                await client.notify.get()
                report = client.report()
                print(report.temperature)

    The client either locates the unit with mDNS (:meth:`managed`) or talks
    to a fixed host (:meth:`unmanaged`). ``notify`` holds at most one pending
    ``True``; always read :meth:`report` after waking up.
    """

    def __init__(
        self,
        config: DavisConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        locator: Locator | None = None,
    ) -> None:
        if config.host is not None and not config.host.strip():
            raise DavisConfigError("Must supply a valid IP address or hostname")
        self._config = config
        self._log_level = logging.INFO if config.verbose else logging.DEBUG
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._locator = locator
        self._store = ReportStore(verbose=config.verbose)
        self._engine: Engine | None = None
        self._task: asyncio.Task[None] | None = None

        if config.managed:
            _logger.log(self._log_level, "managed client initialized")
        else:
            _logger.log(
                self._log_level,
                "unmanaged client initialized, using WeatherLink Live unit at %s:%d",
                config.host,
                self._port,
            )

    @classmethod
    def managed(cls, *, verbose: bool = False, config: DavisConfig | None = None, **kwargs: Any) -> DavisClient:
        """Client that discovers the unit on the local network with mDNS.

        If multicast DNS is blocked on the network, use :meth:`unmanaged`.
        """
        base = config or DavisConfig()
        return cls(dataclasses.replace(base, host=None, verbose=verbose), **kwargs)

    @classmethod
    def unmanaged(
        cls,
        host: str,
        port: int = 0,
        *,
        verbose: bool = False,
        config: DavisConfig | None = None,
        **kwargs: Any,
    ) -> DavisClient:
        """Client for a unit at a fixed hostname or IP address.

        Raises :class:`DavisConfigError` for an empty *host*. A *port* of
        ``0`` or less selects the default port 80.
        """
        if not host or not host.strip():
            raise DavisConfigError("Must supply a valid IP address or hostname")
        base = config or DavisConfig()
        return cls(dataclasses.replace(base, host=host.strip(), port=port, verbose=verbose), **kwargs)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DavisClient:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def _port(self) -> int:
        return self._config.port if self._config.port > 0 else DEFAULT_PORT

    def _build_engine(self) -> Engine:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession(connector=aiohttp.TCPConnector(force_close=True))
            self._transport = HttpTransport(self._http_session)

        host = self._config.host
        if host is None:
            resolver = AddressResolver(
                self._config,
                self._locator or ZeroconfLocator(),
                log_level=self._log_level,
            )
            return Engine(
                config=self._config,
                store=self._store,
                transport=self._transport,
                resolver=resolver,
                log_level=self._log_level,
            )

        return Engine(
            config=self._config,
            store=self._store,
            transport=self._transport,
            address=UnitAddress.from_host(host, self._port),
            log_level=self._log_level,
        )

    async def start(self) -> None:
        """Start the engine on the running event loop."""
        if self._task is not None:
            raise DavisError("Client already started")
        self._engine = self._build_engine()
        self._task = asyncio.create_task(self._engine.run(), name="pydavis-engine")

    async def run(self) -> None:
        """Run the engine in the current task until it is cancelled."""
        await self.start()
        try:
            await self.wait_closed()
        finally:
            await self.close()

    async def close(self) -> None:
        """Cancel the engine and wait until every loop has exited."""
        if self._engine is not None:
            self._engine.mark_terminating()
        if self._task is not None:
            self._task.cancel()
            await self.wait_closed()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def wait_closed(self) -> None:
        """Block until the engine has fully terminated."""
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])
        if task.done() and not task.cancelled() and task.exception() is not None:
            _logger.error("engine stopped with an error", exc_info=task.exception())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def config(self) -> DavisConfig:
        return self._config

    @property
    def store(self) -> ReportStore:
        return self._store

    @property
    def notify(self) -> asyncio.Queue[bool]:
        """Capacity-1 queue that receives ``True`` when the report changes."""
        return self._store.notify

    @property
    def state(self) -> EngineState:
        if self._engine is None:
            return EngineState.CREATED
        if self._task is not None and self._task.done():
            return EngineState.TERMINATED
        return self._engine.state

    @property
    def address(self) -> UnitAddress | None:
        """Current unit address, or ``None`` while discovery is pending."""
        if self._engine is None:
            return None
        return self._engine.address

    def report(self) -> Report:
        """Return a copy of the latest weather report.

        Raises :class:`~pydavis.exceptions.DavisNoReportError` if no report
        has been produced yet.
        """
        return self._store.snapshot()

