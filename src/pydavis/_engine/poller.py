"""HTTP conditions poll loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pydavis._api.conditions import fetch_current_conditions
from pydavis._discovery import UnitAddress
from pydavis._transport import Transport
from pydavis.config import DavisConfig
from pydavis.exceptions import DavisError
from pydavis.state.store import ReportStore

_logger = logging.getLogger(__name__)


class PullPoller:
    """Fetches current conditions on a fixed period and merges them.

    A failed cycle is logged and skipped; the next tick is the retry.
    """

    def __init__(
        self,
        *,
        config: DavisConfig,
        transport: Transport,
        address: Callable[[], UnitAddress],
        store: ReportStore,
        log_level: int = logging.DEBUG,
    ) -> None:
        self._config = config
        self._transport = transport
        self._address = address
        self._store = store
        self._log_level = log_level

    async def poll_once(self) -> bool:
        """Run a single fetch/decode/merge cycle. Returns whether it succeeded."""
        try:
            conditions = await fetch_current_conditions(self._config, self._transport, self._address())
        except DavisError as exc:
            _logger.log(self._log_level, "failed to fetch conditions: %s", exc)
            return False
        try:
            self._store.merge_from_pull(conditions)
        except DavisError as exc:
            _logger.log(self._log_level, "failed to update report: %s", exc)
            return False
        return True

    async def run(self) -> None:
        """Poll until cancelled."""
        loop = asyncio.get_running_loop()
        interval = self._config.poll_interval
        try:
            await asyncio.sleep(self._config.poll_grace)
            _logger.log(self._log_level, "fetching weather conditions every %.1fs", interval)
            while True:
                deadline = loop.time() + interval
                await self.poll_once()
                await asyncio.sleep(max(0.0, deadline - loop.time()))
        except asyncio.CancelledError:
            _logger.log(self._log_level, "terminating HTTP event loop")
            raise
