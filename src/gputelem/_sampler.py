"""Metric sampling: instantaneous reads and time-averaged sample windows."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from gputelem._errors import BackendError, SampleError
from gputelem._session import BackendHandle
from gputelem._types import DeviceIdentity, MetricKind, SampleWindow

logger = logging.getLogger("gputelem.sampler")


class MetricSampler:
    """Samples metrics from devices resolved on an open session.

    With ``advance_cursor`` the sample-buffer timestamp moves past each
    sample read, so every iteration of an averaged read sees a new sample.
    Without it every iteration queries from timestamp 0. An advancing cursor
    needs a non-zero delay between samples; with none, the backend usually
    has no newer sample and the read fails with SampleError.
    """

    def __init__(
        self,
        handle: BackendHandle,
        *,
        window: SampleWindow | None = None,
        advance_cursor: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._handle = handle
        self._window = window or SampleWindow.single()
        self._advance_cursor = advance_cursor
        self._sleep = sleep

    def sample(
        self,
        identity: DeviceIdentity,
        kind: MetricKind,
        window: SampleWindow | None = None,
    ) -> int:
        """Dispatch to the sampling strategy for ``kind``."""
        if kind is MetricKind.INSTANTANEOUS_POWER:
            return self.sample_power(identity)
        if kind is MetricKind.INSTANTANEOUS_FREQUENCY:
            return self.sample_frequency(identity)
        return self.sample_averaged(identity, kind, window or self._window)

    def sample_power(self, identity: DeviceIdentity) -> int:
        """Instantaneous power draw in milliwatts."""
        try:
            return self._handle.backend.power_usage(identity.native_handle)
        except BackendError as err:
            raise SampleError(f"get power usage of device {identity.index}", str(err)) from err

    def sample_frequency(self, identity: DeviceIdentity) -> int:
        """Current SM clock in MHz."""
        try:
            return self._handle.backend.clock_mhz(identity.native_handle)
        except BackendError as err:
            raise SampleError(f"get clock of device {identity.index}", str(err)) from err

    def sample_averaged_utilization(self, identity: DeviceIdentity, window: SampleWindow) -> int:
        return self.sample_averaged(identity, MetricKind.AVERAGED_UTILIZATION, window)

    def sample_averaged(
        self,
        identity: DeviceIdentity,
        kind: MetricKind,
        window: SampleWindow,
    ) -> int:
        """Average ``window.sample_count`` readings, truncating the result."""
        if not kind.averaged:
            raise ValueError(f"{kind.label} is not a sampled metric")

        operation = f"get {kind.label} samples for device {identity.index}"
        backend = self._handle.backend
        cursor = 0
        total = 0
        for i in range(window.sample_count):
            try:
                samples = backend.samples(identity.native_handle, kind, cursor)
            except BackendError as err:
                raise SampleError(operation, str(err)) from err
            if not samples:
                raise SampleError(operation, "no samples available")

            latest = max(samples, key=lambda s: s.timestamp)
            total += latest.value
            if self._advance_cursor:
                cursor = latest.timestamp
            logger.debug(
                "device %d %s sample %d/%d: %d",
                identity.index, kind.label, i + 1, window.sample_count, latest.value,
            )

            if window.sample_count - i > 1:
                self._sleep(window.inter_sample_delay_seconds)

        return total // window.sample_count
