"""One-shot collection: open a session, resolve, sample, always close."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator

from gputelem._backend import GPUBackend
from gputelem._report import make_report
from gputelem._resolver import DeviceResolver
from gputelem._sampler import MetricSampler
from gputelem._session import BackendHandle
from gputelem._types import MetricKind, SampleWindow, TelemetryReport


def iter_reports(
    handle: BackendHandle,
    kind: MetricKind,
    sampler: MetricSampler,
    *,
    indices: Iterable[int] | None = None,
    count: int | None = None,
    resolver: DeviceResolver | None = None,
) -> Iterator[TelemetryReport]:
    """Yield one report per device, resolving and sampling lazily.

    ``indices`` defaults to every device in ascending order. ``count`` skips
    the device count query when the caller already has it. The first error
    propagates and ends the iteration.
    """
    resolver = resolver or DeviceResolver()
    if count is None:
        count = resolver.count_devices(handle)
    for index in range(count) if indices is None else indices:
        identity = resolver.resolve(handle, index, count=count)
        yield make_report(identity, kind, sampler.sample(identity, kind))


def collect(
    backend: GPUBackend,
    kind: MetricKind,
    *,
    index: int | None = None,
    window: SampleWindow | None = None,
    advance_cursor: bool = True,
    sleep: Callable[[float], None] = time.sleep,
) -> list[TelemetryReport]:
    """Sample ``kind`` on one device (``index``) or all of them.

    The backend session is closed on every path once it has been opened.
    Errors are raised as :class:`gputelem.TelemetryError` subclasses.
    """
    with BackendHandle(backend) as handle:
        sampler = MetricSampler(handle, window=window, advance_cursor=advance_cursor, sleep=sleep)
        indices = None if index is None else [index]
        return list(iter_reports(handle, kind, sampler, indices=indices))
