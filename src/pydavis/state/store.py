"""Thread-safe store for the latest weather report.

This is the only component allowed to modify the report. Every update path
funnels into :meth:`ReportStore._finalize`, which hashes the candidate report,
suppresses notifications until receiver health is known, deduplicates by
checksum and coalesces wake-ups on a capacity-1 queue.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import threading
import zlib
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pydavis.exceptions import DavisDeviceError, DavisNoReportError, DavisSerializationError
from pydavis.ingestion.conditions import pull_patch, push_patch
from pydavis.models.broadcast import BroadcastConditions
from pydavis.models.conditions import CurrentConditions
from pydavis.models.report import MEASUREMENT_FIELDS, Report
from pydavis.state.events import UpdateSource

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _checksum(report: Report) -> tuple[str, bytes]:
    payload = report.canonical_json()
    return hashlib.md5(payload).hexdigest(), payload


class ReportStore:
    """Latest-snapshot holder with checksum dedup and change notification.

    Merges are mutually exclusive under one lock and run to completion; no
    reader ever observes a partially merged report. ``notify`` receives
    ``True`` whenever the report content changes, but never holds more than
    one pending item: bursts of changes collapse into a single wake-up, and
    the consumer reads the current snapshot when it wakes.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        verbose: bool = False,
    ) -> None:
        self._clock = clock
        self._verbose = verbose
        self._lock = threading.Lock()
        self._report = Report()
        self._last_checksum: str | None = None
        self._last_bytes: bytes | None = None
        self.notify: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)

    # ------------------------------------------------------------------
    # Merge entry points
    # ------------------------------------------------------------------

    def merge_from_pull(self, conditions: CurrentConditions) -> bool:
        """Merge conditions retrieved over HTTP.

        Raises :class:`DavisDeviceError` without touching the report when the
        response carries an error object. Returns whether the report changed.
        """
        with self._lock:
            if conditions.error is not None:
                raise DavisDeviceError(
                    conditions.error.message or "unit reported an error",
                    code=conditions.error.code,
                )
            if conditions.data is None:
                return False
            patch = pull_patch(conditions.data)
            candidate = self._report.model_copy(update=patch)
            event_time = conditions.data.timestamp or self._clock()
            return self._finalize(candidate, UpdateSource.HTTP, event_time)

    def merge_from_push(self, broadcast: BroadcastConditions) -> bool:
        """Merge a UDP broadcast. Returns whether the report changed."""
        with self._lock:
            candidate = self._report.model_copy(update=push_patch(broadcast))
            event_time = broadcast.timestamp or self._clock()
            return self._finalize(candidate, UpdateSource.UDP, event_time)

    def replace_from_serialized(self, payload: bytes) -> bool:
        """Replace every report field from its canonical JSON form.

        The store keeps its own lock, queue and checksum state. The source
        report's timestamp becomes the event time when present.
        """
        try:
            incoming = Report.model_validate_json(payload)
        except ValidationError as exc:
            raise DavisSerializationError(f"Invalid report payload: {exc.error_count()} error(s)") from exc

        with self._lock:
            update: dict[str, Any] = {name: getattr(incoming, name) for name in MEASUREMENT_FIELDS}
            candidate = self._report.model_copy(update=update)
            event_time = incoming.timestamp or self._clock()
            return self._finalize(candidate, UpdateSource.JSON, event_time)

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def _finalize(self, candidate: Report, source: UpdateSource, event_time: datetime) -> bool:
        """Commit *candidate* and notify if its content changed.

        Must be called with the lock held.
        """
        try:
            checksum, _ = _checksum(candidate)
        except (TypeError, ValueError) as exc:
            raise DavisSerializationError(f"Failed to hash report: {exc}") from exc

        if not candidate.health_reported:
            # Receiver health unknown: keep the data but never announce it.
            self._report = candidate
            return False

        if checksum == self._last_checksum:
            self._report = candidate
            self._log("no new data from %s (%s)", candidate.device_id, source)
            return False

        stamped = candidate.model_copy(update={"timestamp": event_time})
        self._last_checksum, self._last_bytes = _checksum(stamped)
        self._report = stamped

        try:
            self.notify.put_nowait(True)
        except asyncio.QueueFull:
            self._log("new data from %s (%s) (downstream pressure on notify)", stamped.device_id, source)
        else:
            self._log("new data from %s (%s)", stamped.device_id, source)
        return True

    def _log(self, msg: str, *args: Any) -> None:
        _logger.log(logging.INFO if self._verbose else logging.DEBUG, msg, *args)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def has_report(self) -> bool:
        """Whether a notifiable report has ever been recorded."""
        with self._lock:
            return self._last_bytes is not None

    @property
    def checksum(self) -> str | None:
        """MD5 checksum of the last recorded report."""
        with self._lock:
            return self._last_checksum

    def snapshot(self) -> Report:
        """Return a deep copy of the current report.

        Raises :class:`DavisNoReportError` if no report has been recorded.
        """
        with self._lock:
            if self._last_bytes is None:
                raise DavisNoReportError("No weather report has been produced yet")
            return self._report.model_copy(deep=True)

    def copy(self) -> ReportStore:
        """Return an independent store holding the same report.

        Checksum and canonical bytes are duplicated; the copy gets its own
        lock and its own empty notification queue.
        """
        with self._lock:
            clone = ReportStore(clock=self._clock, verbose=self._verbose)
            clone._report = self._report.model_copy(deep=True)
            clone._last_checksum = self._last_checksum
            clone._last_bytes = self._last_bytes
            return clone

    def to_json(self) -> bytes | None:
        """Canonical JSON of the last recorded report."""
        with self._lock:
            return self._last_bytes

    def serialize(self) -> bytes:
        """Return the zlib-compressed canonical JSON of the last recorded report."""
        with self._lock:
            if self._last_bytes is None:
                raise DavisNoReportError("No weather report has been produced yet")
            return zlib.compress(self._last_bytes)

    def deserialize(self, payload: bytes) -> bool:
        """Replace the report with a snapshot produced by :meth:`serialize`."""
        try:
            raw = zlib.decompress(payload)
        except zlib.error as exc:
            raise DavisSerializationError(f"Invalid compressed report: {exc}") from exc
        return self.replace_from_serialized(raw)
