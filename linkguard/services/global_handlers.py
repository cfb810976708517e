"""
Process-wide failure hooks.

Forwards uncaught exceptions (main thread and worker threads) and unhandled
asyncio task failures into the error log. Previously installed hooks keep
running after ours.
"""

import asyncio
import sys
import threading
from typing import Any, Dict, Optional

from linkguard.services.error_log import ErrorLog
from linkguard.utils.logging import get_logger

logger = get_logger(__name__)

UNCAUGHT_CONTEXT = "Uncaught Error"
THREAD_CONTEXT = "Uncaught Thread Error"
ASYNC_CONTEXT = "Unhandled Promise Rejection"


class GlobalErrorHandlers:
    """Installed hooks; ``uninstall()`` restores the previous ones."""

    def __init__(self, error_log: ErrorLog):
        self.error_log = error_log
        self.installed = False
        self._previous_excepthook = None
        self._previous_threading_hook = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_loop_handler = None

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> "GlobalErrorHandlers":
        """
        Install the hooks.

        Args:
            loop: Event loop whose exception handler is hooked (default: the
                running loop, if any)

        Returns:
            self
        """
        if self.installed:
            return self

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._handle_uncaught

        self._previous_threading_hook = threading.excepthook
        threading.excepthook = self._handle_thread_exception

        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None

        if loop is not None:
            self._loop = loop
            self._previous_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(self._handle_loop_exception)

        self.installed = True
        logger.info(
            "Global error handlers installed",
            extra={"asyncio_handler": loop is not None}
        )
        return self

    def uninstall(self) -> None:
        """Restore the hooks that were in place before ``install()``."""
        if not self.installed:
            return

        if sys.excepthook == self._handle_uncaught:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._handle_thread_exception:
            threading.excepthook = self._previous_threading_hook
        if self._loop is not None and not self._loop.is_closed():
            self._loop.set_exception_handler(self._previous_loop_handler)

        self._loop = None
        self._previous_loop_handler = None
        self.installed = False
        logger.info("Global error handlers uninstalled")

    def _handle_uncaught(self, exc_type, exc_value, exc_traceback) -> None:
        if exc_value is not None and exc_value.__traceback__ is None:
            exc_value = exc_value.with_traceback(exc_traceback)
        self.error_log.log_error(
            exc_value,
            UNCAUGHT_CONTEXT,
            {"exc_type": getattr(exc_type, "__name__", str(exc_type))}
        )
        if self._previous_excepthook is not None:
            self._previous_excepthook(exc_type, exc_value, exc_traceback)

    def _handle_thread_exception(self, args: Any) -> None:
        thread_name = args.thread.name if args.thread is not None else None
        self.error_log.log_error(
            args.exc_value,
            THREAD_CONTEXT,
            {
                "exc_type": getattr(args.exc_type, "__name__", str(args.exc_type)),
                "thread": thread_name,
            }
        )
        if self._previous_threading_hook is not None:
            self._previous_threading_hook(args)

    def _handle_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: Dict[str, Any]
    ) -> None:
        error = context.get("exception") or context.get("message")
        metadata = {"message": context.get("message")}
        task = context.get("task") or context.get("future")
        if task is not None:
            metadata["task"] = repr(task)

        self.error_log.log_error(error, ASYNC_CONTEXT, metadata)

        if self._previous_loop_handler is not None:
            self._previous_loop_handler(loop, context)
        else:
            loop.default_exception_handler(context)
