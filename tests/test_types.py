"""Tests for _types module."""

from __future__ import annotations

import dataclasses

import pytest

from gputelem._types import DeviceIdentity, MetricKind, SampleWindow, TelemetryReport


def test_metric_labels() -> None:
    assert MetricKind.INSTANTANEOUS_POWER.label == "gpu_power"
    assert MetricKind.AVERAGED_UTILIZATION.label == "gpu_util"
    assert MetricKind.AVERAGED_MEMORY_UTILIZATION.label == "memory_util"
    assert MetricKind.AVERAGED_TOTAL_POWER.label == "total_power"
    assert MetricKind.INSTANTANEOUS_FREQUENCY.label == "gpu_freq"


def test_averaged_kinds() -> None:
    assert MetricKind.AVERAGED_UTILIZATION.averaged
    assert MetricKind.AVERAGED_MEMORY_UTILIZATION.averaged
    assert MetricKind.AVERAGED_TOTAL_POWER.averaged
    assert not MetricKind.INSTANTANEOUS_POWER.averaged
    assert not MetricKind.INSTANTANEOUS_FREQUENCY.averaged


class TestSampleWindow:
    def test_single(self) -> None:
        window = SampleWindow.single()
        assert window.sample_count == 1
        assert window.inter_sample_delay_seconds == 0

    def test_zero_samples_rejected(self) -> None:
        with pytest.raises(ValueError, match="sample_count"):
            SampleWindow(sample_count=0)

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError, match="inter_sample_delay_seconds"):
            SampleWindow(sample_count=2, inter_sample_delay_seconds=-1)

    @pytest.mark.parametrize("count", [2.0, True, "3"])
    def test_non_int_count_rejected(self, count: object) -> None:
        with pytest.raises(TypeError, match="sample_count"):
            SampleWindow(sample_count=count)  # type: ignore[arg-type]

    @pytest.mark.parametrize("delay", [0.5, False, "1"])
    def test_non_int_delay_rejected(self, delay: object) -> None:
        with pytest.raises(TypeError, match="inter_sample_delay_seconds"):
            SampleWindow(sample_count=1, inter_sample_delay_seconds=delay)  # type: ignore[arg-type]

    def test_zero_delay_allowed(self) -> None:
        assert SampleWindow(sample_count=5, inter_sample_delay_seconds=0).sample_count == 5


def test_report_is_frozen() -> None:
    report = TelemetryReport(device_index=0, device_name="A", metric_label="gpu_power", value=10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        report.value = 11  # type: ignore[misc]


def test_identity_is_frozen() -> None:
    identity = DeviceIdentity(index=0, name="A", native_handle=object())
    with pytest.raises(dataclasses.FrozenInstanceError):
        identity.index = 1  # type: ignore[misc]
