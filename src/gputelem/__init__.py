"""gputelem: NVIDIA GPU telemetry sampling."""

from __future__ import annotations

from gputelem._backend import GPUBackend, Sample
from gputelem._collect import collect, iter_reports
from gputelem._config import TelemetryConfig
from gputelem._errors import (
    BackendError,
    BackendQueryError,
    BackendUnavailable,
    DeviceNotFound,
    NameTooLong,
    SampleError,
    TelemetryError,
)
from gputelem._nvml import NvmlBackend, create_backend
from gputelem._otlp import build_metrics_request
from gputelem._report import format_device_line, format_line, make_report, parse_line
from gputelem._resolver import DeviceResolver
from gputelem._sampler import MetricSampler
from gputelem._session import BackendHandle
from gputelem._types import DeviceIdentity, MetricKind, SampleWindow, TelemetryReport

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "BackendHandle",
    "BackendQueryError",
    "BackendUnavailable",
    "DeviceIdentity",
    "DeviceNotFound",
    "DeviceResolver",
    "GPUBackend",
    "MetricKind",
    "MetricSampler",
    "NameTooLong",
    "NvmlBackend",
    "Sample",
    "SampleError",
    "SampleWindow",
    "TelemetryConfig",
    "TelemetryError",
    "TelemetryReport",
    "__version__",
    "build_metrics_request",
    "collect",
    "create_backend",
    "format_device_line",
    "format_line",
    "iter_reports",
    "make_report",
    "parse_line",
]
