"""Update sources recognised by the state store."""

from __future__ import annotations

from enum import StrEnum


class UpdateSource(StrEnum):
    HTTP = "http"
    UDP = "udp"
    JSON = "json"
