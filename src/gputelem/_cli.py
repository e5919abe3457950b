"""Command-line entry points: gpu-power, gpu-util, gpu-freq and list-gpus.

Each prints one ``<index>-<name>-<metric>-<value>`` line per device to
stdout. Exit status is 0 on success, 1 when the backend cannot be
initialized and 255 when a later query fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable

from google.protobuf import json_format

from gputelem._backend import GPUBackend
from gputelem._collect import iter_reports
from gputelem._config import TelemetryConfig
from gputelem._errors import BackendUnavailable, DeviceNotFound, TelemetryError
from gputelem._nvml import create_backend
from gputelem._otlp import build_metrics_request
from gputelem._report import format_device_line, format_line
from gputelem._resolver import DeviceResolver
from gputelem._sampler import MetricSampler
from gputelem._session import BackendHandle
from gputelem._types import MetricKind, SampleWindow

logger = logging.getLogger("gputelem.cli")

EXIT_OK = 0
EXIT_INIT_FAILED = 1
EXIT_QUERY_FAILED = 255

BackendFactory = Callable[[], GPUBackend]


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {raw}")
    return value


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {raw}")
    return value


def _parse_index(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise DeviceNotFound(f"resolve device {raw!r}", "index is not an integer") from None


def _build_parser(prog: str, description: str, *, windowed: bool, formats: bool) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "index", nargs="*",
        help="device index; all devices are reported when omitted",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    if windowed:
        parser.add_argument(
            "-n", "--samples", type=_positive_int, default=None,
            help="number of samples to average (default: GPUTELEM_SAMPLE_COUNT or 1)",
        )
        parser.add_argument(
            "-d", "--delay", type=_non_negative_int, default=None,
            help=(
                "seconds between samples (default: GPUTELEM_SAMPLE_DELAY or 1); "
                "0 with more than one sample usually fails, as NVML has no new "
                "sample yet"
            ),
        )
    if formats:
        parser.add_argument(
            "--format", choices=("line", "otlp-json"), default="line",
            help="output format (default: line)",
        )
    return parser


def _setup_logging(config: TelemetryConfig, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _run(
    argv: list[str] | None,
    *,
    prog: str,
    description: str,
    kind: MetricKind | None,
    backend_factory: BackendFactory,
) -> int:
    windowed = kind is not None and kind.averaged
    parser = _build_parser(prog, description, windowed=windowed, formats=kind is not None)
    args = parser.parse_intermixed_args(argv)
    try:
        config = TelemetryConfig.from_env()
    except ValueError as err:
        parser.error(str(err))
    _setup_logging(config, args.verbose)

    window = config.window
    if windowed:
        window = SampleWindow(
            sample_count=config.sample_count if args.samples is None else args.samples,
            inter_sample_delay_seconds=(
                config.inter_sample_delay_seconds if args.delay is None else args.delay
            ),
        )
        if window.sample_count > 1 and window.inter_sample_delay_seconds == 0 and config.advance_cursor:
            logger.warning(
                "averaging %d samples with no delay; NVML may report no new samples",
                window.sample_count,
            )

    try:
        handle = BackendHandle(backend_factory()).open()
    except BackendUnavailable as err:
        print(f"Error: Failed to {err}")
        return EXIT_INIT_FAILED

    try:
        resolver = DeviceResolver()
        count = resolver.count_devices(handle)
        if len(args.index) > 1:
            print("Error: only zero or one argument supported")
            return EXIT_OK
        indices = [_parse_index(args.index[0])] if args.index else list(range(count))

        if kind is None:
            for index in indices:
                print(format_device_line(resolver.resolve(handle, index, count=count)))
            return EXIT_OK

        sampler = MetricSampler(handle, window=window, advance_cursor=config.advance_cursor)
        reports = iter_reports(handle, kind, sampler, indices=indices, count=count, resolver=resolver)
        if args.format == "otlp-json":
            print(json_format.MessageToJson(build_metrics_request(list(reports))))
        else:
            for report in reports:
                print(format_line(report), flush=True)
        return EXIT_OK
    except TelemetryError as err:
        logger.debug("aborting after failed query", exc_info=True)
        print(f"Error: Failed to {err}")
        return EXIT_QUERY_FAILED
    finally:
        handle.close()


def gpu_power_main(argv: list[str] | None = None, *, backend_factory: BackendFactory = create_backend) -> int:
    return _run(
        argv,
        prog="gpu-power",
        description="Print the instantaneous power draw (mW) of NVIDIA GPUs.",
        kind=MetricKind.INSTANTANEOUS_POWER,
        backend_factory=backend_factory,
    )


def gpu_util_main(argv: list[str] | None = None, *, backend_factory: BackendFactory = create_backend) -> int:
    return _run(
        argv,
        prog="gpu-util",
        description="Print the averaged GPU utilization (%) of NVIDIA GPUs.",
        kind=MetricKind.AVERAGED_UTILIZATION,
        backend_factory=backend_factory,
    )


def gpu_freq_main(argv: list[str] | None = None, *, backend_factory: BackendFactory = create_backend) -> int:
    return _run(
        argv,
        prog="gpu-freq",
        description="Print the current SM clock (MHz) of NVIDIA GPUs.",
        kind=MetricKind.INSTANTANEOUS_FREQUENCY,
        backend_factory=backend_factory,
    )


def list_gpus_main(argv: list[str] | None = None, *, backend_factory: BackendFactory = create_backend) -> int:
    return _run(
        argv,
        prog="list-gpus",
        description="Print <index>-<name> for each NVIDIA GPU.",
        kind=None,
        backend_factory=backend_factory,
    )
