"""Backend session lifecycle."""

from __future__ import annotations

import enum
import logging
from types import TracebackType

from gputelem._backend import GPUBackend
from gputelem._errors import BackendError, BackendUnavailable

logger = logging.getLogger("gputelem.session")

# id() of every backend that currently has an open session.
_open_backends: set[int] = set()


class _State(enum.Enum):
    NEW = "new"
    OPEN = "open"
    CLOSED = "closed"


class BackendHandle:
    """Owns one init/shutdown pair on a backend.

    A handle is opened once and closed once, and a backend has at most one
    open handle at a time. Closing again is a no-op, and a failed shutdown is
    logged rather than raised, so close() is always safe to call from cleanup
    paths. Usage::

        with BackendHandle(create_backend()) as session:
            resolver.resolve_all(session)
    """

    def __init__(self, backend: GPUBackend) -> None:
        self._backend = backend
        self._state = _State.NEW

    @property
    def is_open(self) -> bool:
        return self._state is _State.OPEN

    @property
    def backend(self) -> GPUBackend:
        """The backend, available only while the session is open."""
        if self._state is not _State.OPEN:
            raise RuntimeError(f"backend session is {self._state.value}, not open")
        return self._backend

    def open(self) -> BackendHandle:
        if self._state is not _State.NEW:
            raise RuntimeError(f"cannot open a backend session that is {self._state.value}")
        if id(self._backend) in _open_backends:
            raise RuntimeError(f"{self._backend.vendor} backend already has an open session")
        try:
            self._backend.init()
        except BackendError as err:
            self._state = _State.CLOSED
            raise BackendUnavailable(f"initialize {self._backend.vendor} backend", str(err)) from err
        self._state = _State.OPEN
        _open_backends.add(id(self._backend))
        logger.debug("%s backend session opened", self._backend.vendor)
        return self

    def close(self) -> None:
        if self._state is not _State.OPEN:
            logger.debug("close() on %s session ignored", self._state.value)
            return
        self._state = _State.CLOSED
        _open_backends.discard(id(self._backend))
        try:
            self._backend.shutdown()
        except BackendError as err:
            logger.warning("Failed to shut down %s backend: %s", self._backend.vendor, err)
            return
        logger.debug("%s backend session closed", self._backend.vendor)

    def __enter__(self) -> BackendHandle:
        if self._state is not _State.OPEN:
            self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
