"""
Unit tests for the standalone monitor process.
"""

import asyncio

import pytest

from linkguard.runner import MonitorRunner


@pytest.fixture
def runner(fast_settings, monkeypatch):
    monitor_runner = MonitorRunner(fast_settings)
    monkeypatch.setattr(monitor_runner, "_register_signal_handlers", lambda: None)
    return monitor_runner


@pytest.mark.asyncio
async def test_start_until_stop_requested(runner):
    """Test the runner monitors until asked to stop, then shuts down."""
    task = asyncio.create_task(runner.start())

    for _ in range(100):
        if runner.system is not None and runner.system.scheduler.is_running:
            break
        await asyncio.sleep(0.01)

    system = runner.system
    assert system is not None
    assert system.scheduler.is_running is True
    assert system.global_handlers.installed is True

    runner.request_stop()
    await asyncio.wait_for(task, timeout=5)
    await runner.stop()

    assert runner.system is None
    assert system.scheduler.is_running is False
    assert system.global_handlers.installed is False


@pytest.mark.asyncio
async def test_stop_before_start(runner):
    """Test stopping a runner that never started is a no-op."""
    await runner.stop()

    assert runner.system is None


def test_handle_signal_requests_stop(runner):
    """Test a received signal sets the shutdown event."""
    import signal

    runner._handle_signal(signal.SIGTERM)

    assert runner._shutdown_event.is_set()
