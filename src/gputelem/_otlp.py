"""OTLP hand-off: converts TelemetryReport batches to an OTLP metrics request.

Nothing here talks to the network. The request is built for whatever
forwarder ships it onward.
"""

from __future__ import annotations

import platform
import time
from typing import TYPE_CHECKING

from opentelemetry.proto.collector.metrics.v1.metrics_service_pb2 import (
    ExportMetricsServiceRequest,
)
from opentelemetry.proto.common.v1.common_pb2 import (
    AnyValue,
    InstrumentationScope,
    KeyValue,
)
from opentelemetry.proto.metrics.v1.metrics_pb2 import (
    Gauge,
    Metric,
    NumberDataPoint,
    ResourceMetrics,
    ScopeMetrics,
)
from opentelemetry.proto.resource.v1.resource_pb2 import Resource

from gputelem._types import MetricKind

if TYPE_CHECKING:
    from gputelem._types import TelemetryReport

_SDK_NAME = "gputelem"

_UNITS: dict[str, str] = {
    MetricKind.INSTANTANEOUS_POWER.label: "mW",
    MetricKind.INSTANTANEOUS_FREQUENCY.label: "MHz",
    MetricKind.AVERAGED_UTILIZATION.label: "%",
    MetricKind.AVERAGED_MEMORY_UTILIZATION.label: "%",
    MetricKind.AVERAGED_TOTAL_POWER.label: "mW",
}


def _make_attribute(key: str, value: str | int) -> KeyValue:
    """Convert a Python key-value pair to an OTLP KeyValue protobuf."""
    if isinstance(value, int):
        av = AnyValue(int_value=value)
    else:
        av = AnyValue(string_value=str(value))
    return KeyValue(key=key, value=av)


def _report_to_point(report: TelemetryReport, time_unix_nano: int) -> NumberDataPoint:
    return NumberDataPoint(
        attributes=[
            _make_attribute("gpu.index", report.device_index),
            _make_attribute("gpu.name", report.device_name),
        ],
        time_unix_nano=time_unix_nano,
        as_int=report.value,
    )


def build_metrics_request(
    reports: list[TelemetryReport],
    *,
    node_id: str | None = None,
    time_unix_nano: int | None = None,
) -> ExportMetricsServiceRequest:
    """Build an ExportMetricsServiceRequest with one gauge per metric label."""
    from gputelem import __version__

    if time_unix_nano is None:
        time_unix_nano = time.time_ns()

    points: dict[str, list[NumberDataPoint]] = {}
    for report in reports:
        points.setdefault(report.metric_label, []).append(
            _report_to_point(report, time_unix_nano)
        )

    metrics = [
        Metric(name=label, unit=_UNITS.get(label, ""), gauge=Gauge(data_points=data_points))
        for label, data_points in points.items()
    ]

    resource = Resource(attributes=[
        _make_attribute("host.name", node_id or platform.node()),
        _make_attribute("telemetry.sdk.name", _SDK_NAME),
        _make_attribute("telemetry.sdk.version", __version__),
    ])
    scope = InstrumentationScope(name=_SDK_NAME, version=__version__)
    scope_metrics = ScopeMetrics(scope=scope, metrics=metrics)
    resource_metrics = ResourceMetrics(resource=resource, scope_metrics=[scope_metrics])

    return ExportMetricsServiceRequest(resource_metrics=[resource_metrics])
