from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime
from typing import Any

import pytest

from pydavis.decoder import decode_pull, decode_push
from pydavis.exceptions import DavisDeviceError, DavisNoReportError, DavisSerializationError
from pydavis.models.conditions import CurrentConditions
from pydavis.state.store import ReportStore

TS = 1_700_000_000


def _pull(*records: dict[str, Any], did: str = "X", ts: int | None = TS) -> CurrentConditions:
    body = {"data": {"did": did, "ts": ts, "conditions": list(records)}, "error": None}
    return decode_pull(json.dumps(body).encode())


def _iss(**fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {"lsid": 1, "data_structure_type": 1, "txid": 1, "rx_state": 0, "trans_battery_flag": 0}
    record.update(fields)
    return record


def _push(*entries: dict[str, Any], did: str = "X", ts: int = TS + 10):
    body = {"did": did, "ts": ts, "conditions": list(entries)}
    return decode_push(json.dumps(body).encode())


def _fixed_clock() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_first_pull_notifies_and_stamps_payload_time() -> None:
    store = ReportStore()

    assert store.merge_from_pull(_pull(_iss(temp=72.0))) is True

    assert store.notify.qsize() == 1
    report = store.snapshot()
    assert report.device_id == "X"
    assert report.temperature == 72.0
    assert report.rx_state == "Synced"
    assert report.battery_flag == "Nominal"
    assert report.timestamp == datetime.fromtimestamp(TS, tz=UTC)


def test_identical_pull_is_deduplicated() -> None:
    store = ReportStore()
    store.merge_from_pull(_pull(_iss(temp=72.0)))
    store.notify.get_nowait()
    checksum = store.checksum

    assert store.merge_from_pull(_pull(_iss(temp=72.0), ts=TS + 30)) is False

    assert store.notify.qsize() == 0
    assert store.checksum == checksum
    assert store.snapshot().timestamp == datetime.fromtimestamp(TS, tz=UTC)


def test_push_update_keeps_pull_fields() -> None:
    store = ReportStore()
    store.merge_from_pull(_pull(_iss(temp=72.0, wind_speed_last=1.0)))
    store.notify.get_nowait()

    assert store.merge_from_push(_push({"data_structure_type": 1, "wind_speed_last": 5.0, "wind_dir_last": 90})) is True

    report = store.snapshot()
    assert report.temperature == 72.0
    assert report.wind_speed_last == 5.0
    assert report.wind_dir_last == 90
    assert report.timestamp == datetime.fromtimestamp(TS + 10, tz=UTC)
    assert store.notify.qsize() == 1


def test_missing_payload_time_falls_back_to_clock() -> None:
    store = ReportStore(clock=_fixed_clock)

    store.merge_from_pull(_pull(_iss(temp=60.0), ts=None))

    assert store.snapshot().timestamp == _fixed_clock()


def test_no_notification_until_health_is_reported() -> None:
    store = ReportStore()

    indoor_only = _pull({"data_structure_type": 4, "temp_in": 68.0})
    assert store.merge_from_pull(indoor_only) is False
    assert store.notify.qsize() == 0
    assert store.has_report is False
    assert store.checksum is None
    with pytest.raises(DavisNoReportError):
        store.snapshot()

    assert store.merge_from_pull(_pull(_iss(temp=72.0))) is True
    # Data merged while unhealthy is kept.
    assert store.snapshot().indoor_temperature == 68.0


def test_health_label_only_written_when_present() -> None:
    store = ReportStore()
    store.merge_from_pull(_pull(_iss(temp=72.0, rx_state=2, trans_battery_flag=1)))

    record = {"lsid": 1, "data_structure_type": 1, "temp": 73.0}
    store.merge_from_pull(_pull(record))

    report = store.snapshot()
    assert report.temperature == 73.0
    assert report.rx_state == "Lost"
    assert report.battery_flag == "Warning"


def test_bursts_coalesce_into_one_wakeup() -> None:
    store = ReportStore()

    for temp in (70.0, 71.0, 72.0):
        assert store.merge_from_pull(_pull(_iss(temp=temp))) is True

    assert store.notify.qsize() == 1
    assert store.snapshot().temperature == 72.0


def test_device_error_leaves_report_untouched() -> None:
    store = ReportStore()
    store.merge_from_pull(_pull(_iss(temp=72.0)))
    checksum = store.checksum

    failed = CurrentConditions.model_validate({"data": None, "error": {"code": 1, "message": "busy"}})
    with pytest.raises(DavisDeviceError) as exc_info:
        store.merge_from_pull(failed)

    assert exc_info.value.code == 1
    assert store.checksum == checksum
    assert store.snapshot().temperature == 72.0


def test_checksum_is_md5_of_canonical_json() -> None:
    store = ReportStore()
    assert store.to_json() is None

    store.merge_from_pull(_pull(_iss(temp=72.0)))

    payload = store.to_json()
    assert payload is not None
    assert store.checksum == hashlib.md5(payload).hexdigest()
    assert json.loads(payload)["deviceID"] == "X"


def test_serialize_round_trip_into_fresh_store() -> None:
    source = ReportStore()
    source.merge_from_pull(_pull(_iss(temp=72.0), {"data_structure_type": 3, "bar_sea_level": 30.01}))
    source.notify.get_nowait()

    target = ReportStore()
    assert target.deserialize(source.serialize()) is True

    assert target.snapshot() == source.snapshot()
    assert target.checksum == source.checksum
    assert target.notify.qsize() == 1
    assert source.notify.qsize() == 0

    # Same snapshot again carries no new data.
    target.notify.get_nowait()
    assert target.deserialize(source.serialize()) is False
    assert target.notify.qsize() == 0


def test_serialize_requires_a_report() -> None:
    with pytest.raises(DavisNoReportError):
        ReportStore().serialize()


def test_deserialize_rejects_garbage() -> None:
    store = ReportStore()

    with pytest.raises(DavisSerializationError):
        store.deserialize(b"not zlib")
    with pytest.raises(DavisSerializationError):
        store.replace_from_serialized(b"{not json")

    assert store.has_report is False


def test_copy_is_independent() -> None:
    store = ReportStore()
    store.merge_from_pull(_pull(_iss(temp=72.0)))

    clone = store.copy()
    assert clone.checksum == store.checksum
    assert clone.to_json() == store.to_json()
    assert clone.notify is not store.notify
    assert clone.notify.qsize() == 0

    clone.merge_from_pull(_pull(_iss(temp=50.0)))

    assert clone.snapshot().temperature == 50.0
    assert store.snapshot().temperature == 72.0
