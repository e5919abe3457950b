"""GPU backend protocol and shared sample type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from gputelem._types import MetricKind


@dataclass(frozen=True)
class Sample:
    """One entry of a backend's sample buffer."""

    timestamp: int          # microseconds, backend clock
    value: int


@runtime_checkable
class GPUBackend(Protocol):
    """Structural protocol for GPU management backends.

    Every method raises :class:`gputelem.BackendError` when the underlying
    native call fails.
    """

    vendor: str

    def init(self) -> None: ...

    def shutdown(self) -> None: ...

    def device_count(self) -> int: ...

    def handle_by_index(self, index: int) -> Any: ...

    def device_name(self, handle: Any) -> str: ...

    def power_usage(self, handle: Any) -> int: ...

    def clock_mhz(self, handle: Any) -> int: ...

    def samples(self, handle: Any, kind: MetricKind, since: int) -> list[Sample]: ...
