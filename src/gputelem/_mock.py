"""Test-only backend that simulates NVML without a GPU."""

from __future__ import annotations

from dataclasses import dataclass, field

from gputelem._backend import Sample
from gputelem._errors import BackendError
from gputelem._types import MetricKind


@dataclass
class MockDevice:
    """A simulated GPU. ``sample_values`` are handed out in order, the last repeating."""

    name: str
    power_mw: int = 0
    clock_mhz: int = 0
    sample_values: dict[MetricKind, list[int]] = field(default_factory=dict)


class MockBackend:
    """In-memory backend with injectable failures and lifecycle counters.

    Native handles are the device indices. Every operation can be made to
    fail with :meth:`fail`, optionally for a single device index.
    """

    vendor = "Mock"

    def __init__(self, devices: list[MockDevice] | None = None) -> None:
        self.devices = list(devices or [])
        self.init_calls = 0
        self.shutdown_calls = 0
        self.sample_queries: list[tuple[int, MetricKind, int]] = []
        self._failures: dict[str, tuple[str, int | None]] = {}
        self._positions: dict[tuple[int, MetricKind], int] = {}
        self._clock_us = 0

    def fail(self, operation: str, message: str = "Unknown Error", *, index: int | None = None) -> None:
        """Make ``operation`` (a method name) raise BackendError with ``message``."""
        self._failures[operation] = (message, index)

    def _check(self, operation: str, index: int | None = None) -> None:
        failure = self._failures.get(operation)
        if failure is None:
            return
        message, only_index = failure
        if only_index is None or only_index == index:
            raise BackendError(message)

    @property
    def balanced(self) -> bool:
        """True when every init has been matched by a shutdown."""
        return self.init_calls == self.shutdown_calls

    def init(self) -> None:
        self.init_calls += 1
        self._check("init")

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._check("shutdown")

    def device_count(self) -> int:
        self._check("device_count")
        return len(self.devices)

    def handle_by_index(self, index: int) -> int:
        self._check("handle_by_index", index)
        if not 0 <= index < len(self.devices):
            raise BackendError("Invalid Argument")
        return index

    def device_name(self, handle: int) -> str:
        self._check("device_name", handle)
        return self.devices[handle].name

    def power_usage(self, handle: int) -> int:
        self._check("power_usage", handle)
        return self.devices[handle].power_mw

    def clock_mhz(self, handle: int) -> int:
        self._check("clock_mhz", handle)
        return self.devices[handle].clock_mhz

    def samples(self, handle: int, kind: MetricKind, since: int) -> list[Sample]:
        self._check("samples", handle)
        self.sample_queries.append((handle, kind, since))
        values = self.devices[handle].sample_values.get(kind, [])
        if not values:
            return []
        position = self._positions.get((handle, kind), 0)
        self._positions[(handle, kind)] = position + 1
        self._clock_us += 1000
        return [Sample(timestamp=self._clock_us, value=values[min(position, len(values) - 1)])]
