"""TelemetryReport assembly and the ``<index>-<name>-<metric>-<value>`` line format."""

from __future__ import annotations

from gputelem._types import DeviceIdentity, MetricKind, TelemetryReport


def make_report(identity: DeviceIdentity, kind: MetricKind, value: int) -> TelemetryReport:
    return TelemetryReport(
        device_index=identity.index,
        device_name=identity.name,
        metric_label=kind.label,
        value=value,
    )


def format_line(report: TelemetryReport) -> str:
    return f"{report.device_index}-{report.device_name}-{report.metric_label}-{report.value}"


def format_device_line(identity: DeviceIdentity) -> str:
    return f"{identity.index}-{identity.name}"


def parse_line(line: str) -> TelemetryReport:
    """Parse a report line back into a TelemetryReport.

    Device names may contain ``-``, so the index is split off the left and
    the metric label and value off the right.
    """
    text = line.strip()
    index_part, sep, rest = text.partition("-")
    parts = rest.rsplit("-", 2) if sep else []
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"malformed telemetry line: {line!r}")
    name, label, value_part = parts
    try:
        index = int(index_part)
        value = int(value_part)
    except ValueError:
        raise ValueError(f"malformed telemetry line: {line!r}") from None
    if index < 0:
        raise ValueError(f"malformed telemetry line: {line!r}")
    return TelemetryReport(device_index=index, device_name=name, metric_label=label, value=value)
