"""
Failure containment utilities.

This module provides:
- contain_failures decorator for task boundaries that must never raise
- run_contained helper for one-off isolated calls
"""

import inspect
import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, ParamSpec

logger = logging.getLogger(__name__)

# Type variables for generic decorator
P = ParamSpec('P')
T = TypeVar('T')


def contain_failures(
    default: Any = None,
    on_error: Optional[Callable[[Exception, str], Any]] = None,
    label: Optional[str] = None,
):
    """
    Decorator that turns any exception into a logged failure and a default result.

    Used at task boundaries (scheduler ticks, monitor entry points) so that a
    single failure never propagates to the caller. ``asyncio.CancelledError``
    is not an ``Exception`` and still propagates, so cancelled tasks stop.

    Args:
        default: Value returned when the wrapped call fails
        on_error: Optional callback receiving (exception, label), e.g. to
            report the failure into the error log
        label: Name used in log messages (default: function name)

    Returns:
        Decorated function that never raises ``Exception``

    Example:
        @contain_failures(default=False, label="Crash Check")
        async def tick():
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = label or func.__name__

        def _handle(e: Exception) -> Any:
            logger.error(f"{name} failed: {e}", exc_info=True)
            if on_error is not None:
                try:
                    on_error(e, name)
                except Exception as callback_error:
                    logger.error(
                        f"{name} failure callback raised: {callback_error}",
                        exc_info=True
                    )
            return default

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return _handle(e)

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return _handle(e)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def run_contained(
    operation: Callable[[], Any],
    name: str,
    on_error: Optional[Callable[[Exception, str], Any]] = None,
) -> bool:
    """
    Run a sync or async operation in isolation.

    Args:
        operation: No-argument callable, may return an awaitable
        name: Operation name for logging
        on_error: Optional callback receiving (exception, name)

    Returns:
        True if the operation completed, False if it raised
    """
    try:
        await maybe_await(operation())
        return True
    except Exception as e:
        logger.error(f"{name} failed: {e}", exc_info=True)
        if on_error is not None:
            on_error(e, name)
        return False
