"""Core types: metric kinds, sample windows, device identities and reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class MetricKind(enum.Enum):
    """Metric to sample. The value is the label printed in report lines."""

    INSTANTANEOUS_POWER = "gpu_power"
    INSTANTANEOUS_FREQUENCY = "gpu_freq"
    AVERAGED_UTILIZATION = "gpu_util"
    AVERAGED_MEMORY_UTILIZATION = "memory_util"
    AVERAGED_TOTAL_POWER = "total_power"

    @property
    def label(self) -> str:
        return self.value

    @property
    def averaged(self) -> bool:
        """True if the metric is read from the backend's sample buffer."""
        return self in _AVERAGED_KINDS


_AVERAGED_KINDS = frozenset({
    MetricKind.AVERAGED_UTILIZATION,
    MetricKind.AVERAGED_MEMORY_UTILIZATION,
    MetricKind.AVERAGED_TOTAL_POWER,
})


@dataclass(frozen=True)
class SampleWindow:
    """How many samples to average and how long to wait between them."""

    sample_count: int = 1
    inter_sample_delay_seconds: int = 0

    def __post_init__(self) -> None:
        for field_name in ("sample_count", "inter_sample_delay_seconds"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{field_name} must be an int, got {value!r}")
        if self.sample_count < 1:
            raise ValueError(f"sample_count must be positive, got {self.sample_count}")
        if self.inter_sample_delay_seconds < 0:
            raise ValueError(
                "inter_sample_delay_seconds must be non-negative, "
                f"got {self.inter_sample_delay_seconds}"
            )

    @classmethod
    def single(cls) -> SampleWindow:
        return cls(sample_count=1, inter_sample_delay_seconds=0)


@dataclass(frozen=True)
class DeviceIdentity:
    """A resolved GPU. ``native_handle`` is only valid while its session is open."""

    index: int
    name: str
    native_handle: Any


@dataclass(frozen=True)
class TelemetryReport:
    """Immutable result of one (device, metric) query."""

    device_index: int
    device_name: str
    metric_label: str
    value: int
