"""Exception hierarchy.

Backends raise :class:`BackendError` carrying the vendor library's own
description. The session, resolver and sampler translate those into
:class:`TelemetryError` subclasses that also name the failing operation.
"""

from __future__ import annotations


class BackendError(Exception):
    """Raised by a backend when a native call does not succeed."""


class TelemetryError(Exception):
    """Base class for failures surfaced to callers of the library."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail


class BackendUnavailable(TelemetryError):
    """The backend session could not be initialized."""


class BackendQueryError(TelemetryError):
    """Device count, handle or name lookup failed."""


class DeviceNotFound(TelemetryError):
    """The requested device index is outside ``[0, device_count)``."""


class NameTooLong(TelemetryError):
    """The backend reported a device name that exceeds the name limit."""


class SampleError(TelemetryError):
    """A metric query failed or produced no usable value."""
