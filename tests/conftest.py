"""Shared fixtures: a two-device mock backend."""

from __future__ import annotations

import pytest

import gputelem._session as session_mod
from gputelem._mock import MockBackend, MockDevice
from gputelem._types import MetricKind


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend([
        MockDevice(
            name="A",
            power_mw=10,
            clock_mhz=1410,
            sample_values={MetricKind.AVERAGED_UTILIZATION: [30]},
        ),
        MockDevice(
            name="B",
            power_mw=20,
            clock_mhz=1530,
            sample_values={MetricKind.AVERAGED_UTILIZATION: [70]},
        ),
    ])


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("SAMPLE_COUNT", "SAMPLE_DELAY", "ADVANCE_CURSOR", "LOG_LEVEL"):
        monkeypatch.delenv(f"GPUTELEM_{key}", raising=False)


@pytest.fixture(autouse=True)
def _reset_open_sessions() -> None:
    session_mod._open_backends.clear()
