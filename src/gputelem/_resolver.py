"""Index to device identity resolution."""

from __future__ import annotations

import logging

from gputelem._errors import BackendError, BackendQueryError, DeviceNotFound, NameTooLong
from gputelem._session import BackendHandle
from gputelem._types import DeviceIdentity

logger = logging.getLogger("gputelem.resolver")

# NVML_DEVICE_NAME_BUFFER_SIZE is 64 bytes including the terminator.
MAX_NAME_BYTES = 63


class DeviceResolver:
    """Maps zero-based device indices to :class:`DeviceIdentity` values."""

    def count_devices(self, handle: BackendHandle) -> int:
        try:
            count = handle.backend.device_count()
        except BackendError as err:
            raise BackendQueryError("query device count", str(err)) from err
        logger.debug("%d device(s) present", count)
        return count

    def resolve(self, handle: BackendHandle, index: int, *, count: int | None = None) -> DeviceIdentity:
        """Resolve one device. ``count`` skips the device count query when known."""
        if count is None:
            count = self.count_devices(handle)
        if index < 0 or index >= count:
            raise DeviceNotFound(
                f"resolve device {index}", f"index out of range, {count} device(s) present"
            )

        backend = handle.backend
        try:
            native = backend.handle_by_index(index)
        except BackendError as err:
            raise BackendQueryError(f"get handle for device {index}", str(err)) from err
        try:
            name = backend.device_name(native)
        except BackendError as err:
            raise BackendQueryError(f"get name of device {index}", str(err)) from err

        if not name:
            raise BackendQueryError(f"get name of device {index}", "backend returned an empty name")
        size = len(name.encode("utf-8"))
        if size > MAX_NAME_BYTES:
            raise NameTooLong(
                f"get name of device {index}",
                f"name is {size} bytes, limit is {MAX_NAME_BYTES}",
            )
        return DeviceIdentity(index=index, name=name, native_handle=native)

    def resolve_all(self, handle: BackendHandle) -> list[DeviceIdentity]:
        """Resolve every device in ascending index order; the first error aborts."""
        count = self.count_devices(handle)
        return [self.resolve(handle, i, count=count) for i in range(count)]
