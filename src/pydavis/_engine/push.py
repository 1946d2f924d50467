"""UDP broadcast receiver and its lease watchdog.

The unit only broadcasts after ``/v1/real_time`` grants a lease. The
watchdog renews the lease whenever no broadcast has been merged within the
receive deadline; the receiver treats a read timeout or socket error as a
cue to close its socket and reopen it on the current lease port.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pydavis._api.real_time import request_broadcast_lease
from pydavis._discovery import UnitAddress
from pydavis._transport import Transport
from pydavis.config import DavisConfig
from pydavis.decoder import decode_push
from pydavis.exceptions import DavisError
from pydavis.state.store import ReportStore

_logger = logging.getLogger(__name__)


@dataclass
class LeaseState:
    """Broadcast lease shared by the receiver and the watchdog.

    ``port`` is ``0`` until a lease is granted. ``last_received`` is the
    monotonic time of the last merged broadcast; it starts in the distant
    past so the first watchdog tick requests a lease.
    """

    port: int = 0
    last_received: float = float("-inf")
    resolved: asyncio.Event = field(default_factory=asyncio.Event)

    def __post_init__(self) -> None:
        if self.port:
            self.resolved.set()


class LeaseWatchdog:
    """Requests a broadcast lease whenever the UDP stream has gone quiet."""

    def __init__(
        self,
        *,
        config: DavisConfig,
        transport: Transport,
        address: Callable[[], UnitAddress],
        lease: LeaseState,
        clock: Callable[[], float] = time.monotonic,
        log_level: int = logging.DEBUG,
    ) -> None:
        self._config = config
        self._transport = transport
        self._address = address
        self._lease = lease
        self._clock = clock
        self._log_level = log_level

    async def tick(self) -> bool:
        """Renew the lease if the stream is stale. Returns whether a lease was granted."""
        if self._clock() - self._lease.last_received <= self._config.receive_deadline:
            return False
        try:
            grant = await request_broadcast_lease(self._config, self._transport, self._address())
        except DavisError as exc:
            _logger.log(self._log_level, "failed to enable UDP broadcasts: %s", exc)
            return False

        previous = self._lease.port
        self._lease.port = grant.port
        if previous == 0 and grant.port:
            self._lease.resolved.set()
        _logger.log(
            self._log_level,
            "enabled UDP broadcasts on port %d for %ds",
            grant.port,
            grant.duration,
        )
        return True

    async def run(self) -> None:
        """Tick immediately, then every ``watchdog_interval`` until cancelled."""
        loop = asyncio.get_running_loop()
        interval = self._config.watchdog_interval
        _logger.log(self._log_level, "initializing UDP watchdog")
        try:
            while True:
                deadline = loop.time() + interval
                await self.tick()
                await asyncio.sleep(max(0.0, deadline - loop.time()))
        except asyncio.CancelledError:
            _logger.log(self._log_level, "terminating UDP watchdog")
            raise


class _BroadcastProtocol(asyncio.DatagramProtocol):
    """Queues received datagrams and socket errors for the receive loop."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | OSError] = asyncio.Queue()

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._queue.put_nowait(data)

    def error_received(self, exc: Exception) -> None:
        self._queue.put_nowait(exc if isinstance(exc, OSError) else OSError(str(exc)))

    def connection_lost(self, exc: Exception | None) -> None:
        self._queue.put_nowait(exc if isinstance(exc, OSError) else OSError("socket closed"))

    async def next_packet(self) -> bytes:
        item = await self._queue.get()
        if isinstance(item, OSError):
            raise item
        return item


class PushReceiver:
    """Listens for UDP broadcasts on the leased port and merges them."""

    def __init__(
        self,
        *,
        config: DavisConfig,
        lease: LeaseState,
        store: ReportStore,
        watchdog: LeaseWatchdog,
        clock: Callable[[], float] = time.monotonic,
        log_level: int = logging.DEBUG,
    ) -> None:
        self._config = config
        self._lease = lease
        self._store = store
        self._watchdog = watchdog
        self._clock = clock
        self._log_level = log_level

    def handle_packet(self, payload: bytes) -> bool:
        """Decode and merge one datagram. Malformed packets are dropped."""
        try:
            broadcast = decode_push(payload)
        except DavisError as exc:
            _logger.log(self._log_level, "failed to parse broadcast: %s", exc)
            return False
        try:
            self._store.merge_from_push(broadcast)
        except DavisError as exc:
            _logger.log(self._log_level, "failed to update report: %s", exc)
            return False
        self._lease.last_received = self._clock()
        return True

    async def run(self) -> None:
        """Run the watchdog and the receive loop until cancelled."""
        async with asyncio.TaskGroup() as tg:
            tg.create_task(self._watchdog.run(), name="pydavis-udp-watchdog")
            await self._listen()

    async def _listen(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._config.watchdog_interval
        try:
            while True:
                if self._lease.port == 0:
                    await self._lease.resolved.wait()
                await asyncio.sleep(interval)

                port = self._lease.port
                try:
                    transport, protocol = await loop.create_datagram_endpoint(
                        _BroadcastProtocol,
                        local_addr=("0.0.0.0", port),
                    )
                except OSError as exc:
                    _logger.log(
                        self._log_level,
                        "failed to open UDP socket on port %d, retrying in %.1fs: %s",
                        port,
                        interval,
                        exc,
                    )
                    continue

                _logger.log(self._log_level, "listening for weather broadcasts on port %d", port)
                try:
                    await self._receive(protocol)
                finally:
                    transport.close()
        except asyncio.CancelledError:
            _logger.log(self._log_level, "terminating UDP event loop")
            raise

    async def _receive(self, protocol: _BroadcastProtocol) -> None:
        """Read until the deadline expires or the socket fails."""
        while True:
            try:
                async with asyncio.timeout(self._config.receive_deadline):
                    payload = await protocol.next_packet()
            except TimeoutError:
                _logger.log(
                    self._log_level,
                    "no UDP broadcast within %.0fs, reprovisioning",
                    self._config.receive_deadline,
                )
                return
            except OSError as exc:
                _logger.log(self._log_level, "failed to read from UDP socket, reprovisioning: %s", exc)
                return
            self.handle_packet(payload)
