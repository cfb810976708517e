"""
Unit tests for the process-wide failure hooks.
"""

import asyncio
import sys
import threading

import pytest

from linkguard.services.error_log import ErrorLog
from linkguard.services.global_handlers import (
    ASYNC_CONTEXT,
    THREAD_CONTEXT,
    UNCAUGHT_CONTEXT,
    GlobalErrorHandlers,
)


@pytest.fixture
def error_log(clock) -> ErrorLog:
    return ErrorLog(capacity=100, platform="test", clock=clock)


@pytest.fixture
def handlers(error_log):
    installed = GlobalErrorHandlers(error_log)
    yield installed
    installed.uninstall()


class TestInstall:
    """Test installing and removing the hooks."""

    def test_install_replaces_and_uninstall_restores(self, handlers):
        """Test the hooks are swapped in and restored afterwards."""
        original_excepthook = sys.excepthook
        original_thread_hook = threading.excepthook

        handlers.install()

        assert sys.excepthook is not original_excepthook
        assert threading.excepthook is not original_thread_hook

        handlers.uninstall()

        assert sys.excepthook is original_excepthook
        assert threading.excepthook is original_thread_hook

    def test_install_is_idempotent(self, handlers):
        """Test a second install keeps the first hooks in place."""
        handlers.install()
        hook = sys.excepthook

        handlers.install()

        assert sys.excepthook is hook
        assert handlers.installed is True


class TestForwarding:
    """Test failures reach the error log."""

    def test_uncaught_exception(self, handlers, error_log):
        """Test an uncaught exception is logged and the previous hook still runs."""
        seen = []
        previous = sys.excepthook
        sys.excepthook = lambda *args: seen.append(args)
        try:
            handlers.install()
            try:
                raise ValueError("render failed")
            except ValueError:
                sys.excepthook(*sys.exc_info())
            handlers.uninstall()
        finally:
            sys.excepthook = previous

        record = error_log.get_recent_errors(1)[0]
        assert record.context == UNCAUGHT_CONTEXT
        assert record.message == "render failed"
        assert record.metadata["exc_type"] == "ValueError"
        assert len(seen) == 1

    def test_thread_exception(self, handlers, error_log):
        """Test an exception escaping a worker thread is logged."""
        def worker():
            raise RuntimeError("sync worker died")

        seen = []
        previous = threading.excepthook
        threading.excepthook = lambda args: seen.append(args.exc_type)
        try:
            handlers.install()
            thread = threading.Thread(target=worker, name="sync-worker")
            thread.start()
            thread.join()
            handlers.uninstall()
        finally:
            threading.excepthook = previous

        assert seen == [RuntimeError]
        record = error_log.get_recent_errors(1)[0]
        assert record.context == THREAD_CONTEXT
        assert record.message == "sync worker died"
        assert record.metadata["thread"] == "sync-worker"

    async def test_unhandled_task_exception(self, handlers, error_log):
        """Test a failure reported to the loop exception handler is logged."""
        loop = asyncio.get_running_loop()
        previous_handler = loop.get_exception_handler()
        handlers.install(loop)

        loop.call_exception_handler({
            "message": "Task exception was never retrieved",
            "exception": ConnectionError("fetch rejected"),
        })

        handlers.uninstall()

        record = error_log.get_recent_errors(1)[0]
        assert record.context == ASYNC_CONTEXT
        assert record.message == "fetch rejected"
        assert record.metadata["message"] == "Task exception was never retrieved"
        assert loop.get_exception_handler() is previous_handler

    async def test_loop_message_without_exception(self, handlers, error_log):
        """Test a loop report with only a message is still logged."""
        loop = asyncio.get_running_loop()
        handlers.install(loop)

        loop.call_exception_handler({"message": "Future exception was never retrieved"})

        record = error_log.get_recent_errors(1)[0]
        assert record.context == ASYNC_CONTEXT
        assert record.message == "Future exception was never retrieved"
