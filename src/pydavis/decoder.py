"""Decoders for raw WeatherLink Live payloads.

Each decoder validates raw bytes into a typed model. A payload carrying a
non-null ``error`` object raises :class:`~pydavis.exceptions.DavisDeviceError`
with the unit's message; anything that is not valid JSON of the expected
shape raises :class:`~pydavis.exceptions.DavisDecodeError`.
"""

from __future__ import annotations

from pydantic import ValidationError

from pydavis.exceptions import DavisDecodeError, DavisDeviceError
from pydavis.models._base import DeviceError
from pydavis.models.broadcast import BroadcastConditions, LeaseGrant, LeaseResponse
from pydavis.models.conditions import CurrentConditions


def _raise_device_error(error: DeviceError) -> None:
    raise DavisDeviceError(error.message or "unit reported an error", code=error.code)


def decode_pull(payload: bytes) -> CurrentConditions:
    """Decode a ``/v1/current_conditions`` response body."""
    try:
        conditions = CurrentConditions.model_validate_json(payload)
    except ValidationError as exc:
        raise DavisDecodeError(f"Invalid current conditions payload: {exc.error_count()} error(s)") from exc
    if conditions.error is not None:
        _raise_device_error(conditions.error)
    if conditions.data is None:
        raise DavisDecodeError("Current conditions payload missing data")
    return conditions


def decode_push(payload: bytes) -> BroadcastConditions:
    """Decode a UDP broadcast datagram."""
    try:
        return BroadcastConditions.model_validate_json(payload)
    except ValidationError as exc:
        raise DavisDecodeError(f"Invalid broadcast payload: {exc.error_count()} error(s)") from exc


def decode_lease_response(payload: bytes) -> LeaseGrant:
    """Decode a ``/v1/real_time`` response body into the granted lease."""
    try:
        response = LeaseResponse.model_validate_json(payload)
    except ValidationError as exc:
        raise DavisDecodeError(f"Invalid broadcast lease payload: {exc.error_count()} error(s)") from exc
    if response.error is not None:
        _raise_device_error(response.error)
    if response.data is None:
        raise DavisDecodeError("Broadcast lease payload missing data")
    return response.data
