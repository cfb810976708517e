"""
Standalone monitor process.

Builds the resilience system, installs the global error handlers and runs the
auto-recovery scheduler until SIGTERM/SIGINT, then shuts down cleanly.
"""

import asyncio
import signal
import sys
from typing import Optional

from linkguard.config import Settings, settings
from linkguard.services.system import ResilienceSystem, build_system
from linkguard.utils.logging import setup_logging, get_logger

logger = get_logger(__name__)


class MonitorRunner:
    """Runs the scheduler until asked to stop."""

    def __init__(self, runner_settings: Optional[Settings] = None):
        """Initialize the runner."""
        self.settings = runner_settings or settings
        self.system: Optional[ResilienceSystem] = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """
        Build the system, start monitoring and wait for a stop request.
        """
        logger.info("Starting monitor process...")

        try:
            self.system = build_system(self.settings)
            await self.system.connect_storage()
            self.system.setup_global_error_handlers()
            self.system.setup_auto_recovery()

            self._register_signal_handlers()

            logger.info("Monitor process started successfully")

            await self._shutdown_event.wait()

        except Exception as e:
            logger.error(f"Failed to start monitor: {e}", exc_info=True)
            raise

    def request_stop(self) -> None:
        """Ask ``start()`` to return."""
        self._shutdown_event.set()

    async def stop(self) -> None:
        """Stop monitoring and release resources."""
        logger.info("Stopping monitor process...")

        if self.system is not None:
            await self.system.shutdown()
            self.system = None

        logger.info("Monitor process stopped")

    def _register_signal_handlers(self) -> None:
        """Register SIGTERM/SIGINT handlers on the running loop."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform/loop; rely on KeyboardInterrupt
                logger.debug(f"Signal handler for {sig.name} not installed")

        logger.info("Signal handlers registered (SIGTERM, SIGINT)")

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, initiating graceful shutdown...")
        self.request_stop()


async def main():
    """Main entry point for the monitor process."""
    setup_logging(settings.log_level.upper())

    runner = MonitorRunner()

    try:
        await runner.start()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.error(f"Monitor process failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await runner.stop()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
