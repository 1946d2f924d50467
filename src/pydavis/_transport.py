"""HTTP transport for the unit's request/response routes."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from pydavis.exceptions import DavisTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the route modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get(self, url: str, *, timeout: float) -> bytes:
        ...


class HttpTransport:
    """aiohttp GET transport that allows one request in flight at a time.

    The unit cannot serve concurrent HTTP requests, so the conditions poll
    and the broadcast lease request queue up behind a single lock.
    """

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session
        self._lock = asyncio.Lock()

    async def get(self, url: str, *, timeout: float) -> bytes:
        """GET *url* and return the response body.

        Raises :class:`DavisTransportError` on network failure, timeout or a
        non-200 status.
        """
        async with self._lock:
            _logger.debug("GET %s", url)
            try:
                async with self._http.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
                    body = await resp.read()
                    if resp.status != 200:
                        raise DavisTransportError(
                            f"HTTP {resp.status} from {url}: {body[:200]!r}",
                            status_code=resp.status,
                            route=url,
                        )
            except DavisTransportError:
                raise
            except TimeoutError as exc:
                raise DavisTransportError(f"Request to {url} timed out after {timeout}s", route=url) from exc
            except aiohttp.ClientError as exc:
                raise DavisTransportError(f"Request to {url} failed: {exc}", route=url) from exc
        return body
