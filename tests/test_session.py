"""Tests for the backend session lifecycle."""

from __future__ import annotations

import logging

import pytest

from gputelem._errors import BackendUnavailable
from gputelem._mock import MockBackend
from gputelem._session import BackendHandle


class TestOpenClose:
    def test_open_then_close_pairs_calls(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        assert handle.is_open
        handle.close()
        assert not handle.is_open
        assert backend.init_calls == 1
        assert backend.shutdown_calls == 1

    def test_double_close_is_noop(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        handle.close()
        handle.close()
        assert backend.shutdown_calls == 1

    def test_close_before_open_is_noop(self, backend: MockBackend) -> None:
        BackendHandle(backend).close()
        assert backend.shutdown_calls == 0

    def test_reopen_rejected(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        with pytest.raises(RuntimeError):
            handle.open()
        handle.close()
        with pytest.raises(RuntimeError):
            handle.open()
        assert backend.init_calls == 1

    def test_backend_unavailable_after_close(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        handle.close()
        with pytest.raises(RuntimeError, match="closed"):
            _ = handle.backend


class TestInitFailure:
    def test_raises_backend_unavailable(self, backend: MockBackend) -> None:
        backend.fail("init", "Driver Not Loaded")
        with pytest.raises(BackendUnavailable) as exc_info:
            BackendHandle(backend).open()
        assert exc_info.value.detail == "Driver Not Loaded"
        assert "initialize" in exc_info.value.operation

    def test_no_shutdown_after_failed_init(self, backend: MockBackend) -> None:
        backend.fail("init")
        handle = BackendHandle(backend)
        with pytest.raises(BackendUnavailable):
            handle.open()
        handle.close()
        assert backend.shutdown_calls == 0


class TestShutdownFailure:
    def test_logged_not_raised(self, backend: MockBackend, caplog: pytest.LogCaptureFixture) -> None:
        backend.fail("shutdown", "GPU is lost")
        handle = BackendHandle(backend).open()
        with caplog.at_level(logging.WARNING, logger="gputelem.session"):
            handle.close()
        assert "GPU is lost" in caplog.text
        assert backend.shutdown_calls == 1


class TestContextManager:
    def test_closes_on_exception(self, backend: MockBackend) -> None:
        with pytest.raises(ValueError):
            with BackendHandle(backend) as handle:
                assert handle.is_open
                raise ValueError("boom")
        assert backend.balanced

    def test_accepts_already_open_handle(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        with handle:
            pass
        assert backend.init_calls == 1
        assert backend.shutdown_calls == 1

    def test_failed_open_skips_close(self, backend: MockBackend) -> None:
        backend.fail("init")
        with pytest.raises(BackendUnavailable):
            with BackendHandle(backend):
                pass
        assert backend.shutdown_calls == 0

    def test_closed_handle_rejected(self, backend: MockBackend) -> None:
        handle = BackendHandle(backend).open()
        handle.close()
        with pytest.raises(RuntimeError, match="closed"):
            with handle:
                pass
        assert backend.init_calls == 1
        assert backend.shutdown_calls == 1

    def test_handle_after_failed_init_rejected(self, backend: MockBackend) -> None:
        backend.fail("init")
        handle = BackendHandle(backend)
        with pytest.raises(BackendUnavailable):
            handle.open()
        with pytest.raises(RuntimeError):
            with handle:
                pass
        assert backend.init_calls == 1

    def test_independent_sessions_coexist(self) -> None:
        first, second = MockBackend(), MockBackend()
        with BackendHandle(first) as a, BackendHandle(second) as b:
            assert a.is_open and b.is_open
        assert first.balanced and second.balanced


class TestOneSessionPerBackend:
    def test_second_handle_on_open_backend_rejected(self, backend: MockBackend) -> None:
        first = BackendHandle(backend).open()
        with pytest.raises(RuntimeError, match="already has an open session"):
            BackendHandle(backend).open()
        assert backend.init_calls == 1
        assert first.is_open
        first.close()

    def test_backend_reusable_after_close(self, backend: MockBackend) -> None:
        BackendHandle(backend).open().close()
        with BackendHandle(backend) as handle:
            assert handle.is_open
        assert backend.init_calls == 2
        assert backend.shutdown_calls == 2

    def test_backend_released_after_failed_shutdown(self, backend: MockBackend) -> None:
        backend.fail("shutdown", "GPU is lost")
        BackendHandle(backend).open().close()
        assert BackendHandle(backend).open().is_open

    def test_failed_init_does_not_claim_backend(self, backend: MockBackend) -> None:
        backend.fail("init")
        with pytest.raises(BackendUnavailable):
            BackendHandle(backend).open()
        backend._failures.clear()
        with BackendHandle(backend) as handle:
            assert handle.is_open
