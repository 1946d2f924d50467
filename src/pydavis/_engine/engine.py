"""Acquisition engine.

Sequences discovery before the HTTP and UDP loops and owns the task tree:

    engine
    ├── discovery (managed clients only)
    ├── HTTP poller
    └── UDP receiver
        └── lease watchdog

Cancelling the engine task cancels every descendant; :meth:`Engine.run`
returns (by raising ``CancelledError``) only after all of them have exited.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import StrEnum

from pydavis._discovery import AddressResolver, UnitAddress
from pydavis._engine.poller import PullPoller
from pydavis._engine.push import LeaseState, LeaseWatchdog, PushReceiver
from pydavis._transport import Transport
from pydavis.config import DavisConfig
from pydavis.exceptions import DavisConfigError
from pydavis.state.store import ReportStore

_logger = logging.getLogger(__name__)


class EngineState(StrEnum):
    CREATED = "created"
    WAITING_FOR_ADDRESS = "waiting_for_address"
    RUNNING = "running"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class Engine:
    """Runs discovery, HTTP polling and UDP reception for one unit.

    Exactly one of *resolver* (managed) or *address* (unmanaged) must be
    given.
    """

    def __init__(
        self,
        *,
        config: DavisConfig,
        store: ReportStore,
        transport: Transport,
        resolver: AddressResolver | None = None,
        address: UnitAddress | None = None,
        clock: Callable[[], float] = time.monotonic,
        log_level: int = logging.DEBUG,
    ) -> None:
        if (resolver is None) == (address is None):
            raise DavisConfigError("Engine needs either a resolver or a fixed address")
        self._config = config
        self._store = store
        self._transport = transport
        self._resolver = resolver
        self._fixed_address = address
        self._log_level = log_level
        self._state = EngineState.CREATED

        self.lease = LeaseState(port=config.broadcast_port)
        self.poller = PullPoller(
            config=config,
            transport=transport,
            address=self._current_address,
            store=store,
            log_level=log_level,
        )
        watchdog = LeaseWatchdog(
            config=config,
            transport=transport,
            address=self._current_address,
            lease=self.lease,
            clock=clock,
            log_level=log_level,
        )
        self.receiver = PushReceiver(
            config=config,
            lease=self.lease,
            store=store,
            watchdog=watchdog,
            clock=clock,
            log_level=log_level,
        )

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def address(self) -> UnitAddress | None:
        """Current unit address, or ``None`` while discovery is pending."""
        if self._fixed_address is not None:
            return self._fixed_address
        if self._resolver is None:
            raise DavisConfigError("Engine has neither a resolver nor a fixed address")
        return self._resolver.address

    def _current_address(self) -> UnitAddress:
        address = self.address
        if address is None:
            raise DavisConfigError("Unit address is not resolved yet")
        return address

    def mark_terminating(self) -> None:
        if self._state not in (EngineState.TERMINATED, EngineState.CREATED):
            self._state = EngineState.TERMINATING

    async def run(self) -> None:
        """Run until cancelled."""
        try:
            async with asyncio.TaskGroup() as tg:
                if self._resolver is not None:
                    self._state = EngineState.WAITING_FOR_ADDRESS
                    tg.create_task(self._resolver.run(), name="pydavis-discovery")
                    _logger.log(self._log_level, "waiting for mDNS autodiscovery")
                    await self._resolver.resolved.wait()

                self._state = EngineState.RUNNING
                _logger.log(self._log_level, "initializing UDP and HTTP event loops")
                tg.create_task(self.poller.run(), name="pydavis-http")
                tg.create_task(self.receiver.run(), name="pydavis-udp")
        except asyncio.CancelledError:
            self._state = EngineState.TERMINATING
            raise
        finally:
            self._state = EngineState.TERMINATED
            _logger.log(self._log_level, "engine terminated")
