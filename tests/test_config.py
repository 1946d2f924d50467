from __future__ import annotations

import pytest

from pydavis.config import DavisConfig


def test_defaults() -> None:
    config = DavisConfig()

    assert config.managed is True
    assert config.port == 80
    assert config.poll_interval == 10.3
    assert config.receive_deadline == 15.0
    assert config.watchdog_interval == 7.5
    assert config.lease_duration == 14400


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAVIS_HOST", "weatherlink.lan")
    monkeypatch.setenv("DAVIS_PORT", "8080")
    monkeypatch.setenv("DAVIS_RECEIVE_DEADLINE", "20")
    monkeypatch.setenv("DAVIS_VERBOSE", "yes")

    config = DavisConfig.from_env()

    assert config.host == "weatherlink.lan"
    assert config.managed is False
    assert config.port == 8080
    assert config.receive_deadline == 20.0
    assert config.watchdog_interval == 10.0
    assert config.verbose is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAVIS_PORT", "8080")
    monkeypatch.setenv("DAVIS_VERBOSE", "1")
    monkeypatch.delenv("DAVIS_HOST", raising=False)

    config = DavisConfig.from_env(port=9000, verbose=False)

    assert config.host is None
    assert config.port == 9000
    assert config.verbose is False
