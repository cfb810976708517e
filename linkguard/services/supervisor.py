"""
Error boundary used by the UI supervisor.

Wraps a rendering operation, forwards its failures to the error log and decides
which fallback the user sees: an ordinary error with a single "try again", or
crash state with force-recovery and hard-refresh actions.
"""

import traceback
from typing import Any, Callable, Optional

from linkguard.models.recovery import FallbackView
from linkguard.utils.logging import get_logger
from linkguard.utils.resilience import maybe_await

logger = get_logger(__name__)

BOUNDARY_CONTEXT = "Component Error Boundary"

ERROR_KIND = "error"
CRASH_KIND = "crash"


class ErrorBoundary:
    """
    Supervisor-side error boundary.

    After a failure the boundary holds the fallback view until the user picks
    an action. ``restart`` is the hook performing a full restart (hard refresh).
    """

    def __init__(self, system, restart: Optional[Callable[[], Any]] = None, debug: bool = False):
        """
        Initialize the boundary.

        Args:
            system: ResilienceSystem the boundary reports into
            restart: Callable performing a full restart; may be async
            debug: Include raw error details and system status in fallbacks
        """
        self.system = system
        self.restart = restart
        self.debug = debug
        self.error: Optional[BaseException] = None
        self.component_stack: Optional[str] = None
        self.fallback: Optional[FallbackView] = None

    @property
    def has_error(self) -> bool:
        return self.fallback is not None

    async def render(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Run a sync or async rendering operation.

        Returns:
            The operation's result, or a FallbackView if it raised
        """
        try:
            return await maybe_await(operation(*args, **kwargs))
        except Exception as e:
            return self.capture(e)

    def capture(self, error: BaseException) -> FallbackView:
        """
        Record a caught rendering failure and build the fallback.

        Args:
            error: The failure

        Returns:
            FallbackView for the current crash state
        """
        component_stack = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        self.system.log_error(error, BOUNDARY_CONTEXT, {"component_stack": component_stack})

        self.error = error
        self.component_stack = component_stack
        self.fallback = self._build_fallback(error, component_stack)
        return self.fallback

    def try_again(self) -> None:
        """Manual "Try Again": reset recovery and drop the fallback."""
        self.system.reset_recovery()
        self._clear()

    async def force_recovery(self) -> bool:
        """
        Manual "Force Recovery".

        Returns:
            True if recovery succeeded; the fallback is dropped in that case
        """
        recovered = await self.system.attempt_recovery()
        if recovered:
            self._clear()
        elif self.error is not None:
            self.fallback = self._build_fallback(self.error, self.component_stack)
        return recovered

    async def hard_refresh(self) -> None:
        """Full restart: reset recovery, clear the log and call the restart hook."""
        logger.warning("Hard refresh requested")
        self.system.reset_recovery()
        self.system.error_log.clear_errors()
        self._clear()
        if self.restart is not None:
            await maybe_await(self.restart())

    def _clear(self) -> None:
        self.error = None
        self.component_stack = None
        self.fallback = None

    def _build_fallback(self, error: BaseException, component_stack: Optional[str]) -> FallbackView:
        if self.system.is_crash_state():
            view = FallbackView(
                kind=CRASH_KIND,
                title="App Recovery Mode",
                message=(
                    "The app encountered multiple errors and is attempting to recover. "
                    "This may take a moment."
                ),
                actions=["force_recovery", "hard_refresh"],
            )
        else:
            view = FallbackView(
                kind=ERROR_KIND,
                title="Oops! Something went wrong",
                message="We're sorry, but something unexpected happened. Please try again.",
                actions=["try_again"],
            )

        if self.debug:
            view = view.model_copy(update={
                "error_message": str(error) or type(error).__name__,
                "component_stack": component_stack,
                "system_status": self.system.get_system_status(),
            })

        return view
