"""NVIDIA backend on top of pynvml."""

from __future__ import annotations

import logging
import warnings
from typing import Any

from gputelem._backend import Sample
from gputelem._errors import BackendError, BackendUnavailable
from gputelem._types import MetricKind

logger = logging.getLogger("gputelem.nvml")

# Suppress deprecation warning from the legacy pynvml wrapper (recommends nvidia-ml-py).
warnings.filterwarnings("ignore", category=FutureWarning, message=".*pynvml.*deprecated.*")
try:
    import pynvml

    _HAS_PYNVML = True
except ImportError:
    pynvml = None  # type: ignore[assignment,unused-ignore]
    _HAS_PYNVML = False


def _sampling_type(kind: MetricKind) -> int:
    assert pynvml is not None
    mapping = {
        MetricKind.AVERAGED_UTILIZATION: pynvml.NVML_GPU_UTILIZATION_SAMPLES,
        MetricKind.AVERAGED_MEMORY_UTILIZATION: pynvml.NVML_MEMORY_UTILIZATION_SAMPLES,
        MetricKind.AVERAGED_TOTAL_POWER: pynvml.NVML_TOTAL_POWER_SAMPLES,
    }
    try:
        return mapping[kind]
    except KeyError:
        raise BackendError(f"{kind.label} is not a sampled metric") from None


def _sample_value(value_type: int, value: Any) -> int:
    """Read the member of the nvmlValue_t union selected by ``value_type``."""
    assert pynvml is not None
    if value_type == pynvml.NVML_VALUE_TYPE_DOUBLE:
        return int(value.dVal)
    if value_type == pynvml.NVML_VALUE_TYPE_UNSIGNED_INT:
        return int(value.uiVal)
    if value_type == pynvml.NVML_VALUE_TYPE_UNSIGNED_LONG:
        return int(value.ulVal)
    if value_type == pynvml.NVML_VALUE_TYPE_UNSIGNED_LONG_LONG:
        return int(value.ullVal)
    if value_type == pynvml.NVML_VALUE_TYPE_SIGNED_LONG_LONG:
        return int(value.sllVal)
    raise BackendError(f"unsupported sample value type {value_type}")


def _text(value: str | bytes) -> str:
    # Older pynvml releases return bytes.
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as err:
            raise BackendError(f"device name is not valid UTF-8: {value!r}") from err
    return value


class NvmlBackend:
    """NVIDIA GPU backend using pynvml."""

    vendor = "NVIDIA"

    def __init__(self) -> None:
        if not _HAS_PYNVML:
            raise BackendUnavailable("initialize NVML", "pynvml is not installed")

    def init(self) -> None:
        assert pynvml is not None
        try:
            pynvml.nvmlInit()
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def shutdown(self) -> None:
        assert pynvml is not None
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def device_count(self) -> int:
        assert pynvml is not None
        try:
            return int(pynvml.nvmlDeviceGetCount())
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def handle_by_index(self, index: int) -> Any:
        assert pynvml is not None
        try:
            return pynvml.nvmlDeviceGetHandleByIndex(index)
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def device_name(self, handle: Any) -> str:
        assert pynvml is not None
        try:
            name = pynvml.nvmlDeviceGetName(handle)
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err
        return _text(name)

    def power_usage(self, handle: Any) -> int:
        assert pynvml is not None
        try:
            return int(pynvml.nvmlDeviceGetPowerUsage(handle))  # mW
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def clock_mhz(self, handle: Any) -> int:
        assert pynvml is not None
        try:
            return int(pynvml.nvmlDeviceGetClockInfo(handle, pynvml.NVML_CLOCK_SM))
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err

    def samples(self, handle: Any, kind: MetricKind, since: int) -> list[Sample]:
        assert pynvml is not None
        sampling_type = _sampling_type(kind)
        try:
            value_type, raw = pynvml.nvmlDeviceGetSamples(handle, sampling_type, since)
        except pynvml.NVMLError as err:
            raise BackendError(str(err)) from err
        logger.debug("%d %s samples since %d", len(raw), kind.label, since)
        return [
            Sample(timestamp=int(s.timeStamp), value=_sample_value(value_type, s.sampleValue))
            for s in raw
        ]


def create_backend() -> NvmlBackend:
    """Factory: returns the NVML backend or raises BackendUnavailable."""
    return NvmlBackend()
