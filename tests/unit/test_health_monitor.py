"""
Unit tests for the health monitor and its default probes.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from linkguard.models.health import ProbeStatus
from linkguard.services.health_monitor import HealthMonitor, http_probe, memory_probe


@pytest.fixture
def monitor(clock) -> HealthMonitor:
    return HealthMonitor(clock=clock)


class TestRunHealthChecks:
    """Test probe execution and aggregation."""

    async def test_all_healthy(self, monitor):
        """Test every truthy probe yields an overall healthy snapshot."""
        async def async_probe():
            return {"latency_ms": 12}

        monitor.register_check("sync", lambda: True)
        monitor.register_check("async", async_probe)

        snapshot = await monitor.run_health_checks()

        assert snapshot.overall_healthy is True
        assert snapshot.results["sync"].status == ProbeStatus.HEALTHY
        assert snapshot.results["async"].result == {"latency_ms": 12}
        assert monitor.get_health_status().status == "healthy"

    async def test_raising_probe_is_isolated(self, monitor):
        """Test a raising probe is recorded as error and the others still run."""
        def broken():
            raise ConnectionError("backend unreachable")

        monitor.register_check("a", lambda: True)
        monitor.register_check("b", broken)
        monitor.register_check("c", lambda: True)

        snapshot = await monitor.run_health_checks()

        assert snapshot.results["a"].status == ProbeStatus.HEALTHY
        assert snapshot.results["b"].status == ProbeStatus.ERROR
        assert snapshot.results["b"].error == "backend unreachable"
        assert snapshot.results["c"].status == ProbeStatus.HEALTHY
        assert snapshot.overall_healthy is False
        assert monitor.get_health_status().status == "unhealthy"

    async def test_falsy_probe_is_unhealthy(self, monitor):
        """Test a falsy probe result marks the probe unhealthy."""
        monitor.register_check("memory", lambda: False)

        snapshot = await monitor.run_health_checks()

        assert snapshot.results["memory"].status == ProbeStatus.UNHEALTHY
        assert snapshot.overall_healthy is False

    async def test_error_without_message_uses_type_name(self, monitor):
        """Test an exception with no message reports its type name."""
        def broken():
            raise TimeoutError()

        monitor.register_check("network", broken)

        snapshot = await monitor.run_health_checks()

        assert snapshot.results["network"].error == "TimeoutError"

    async def test_snapshot_replaces_previous(self, monitor, clock):
        """Test the stored snapshot is replaced by the latest run."""
        monitor.register_check("flaky", lambda: False)
        first = await monitor.run_health_checks()

        clock.advance(1000)
        monitor.register_check("flaky", lambda: True)
        second = await monitor.run_health_checks()

        report = monitor.get_health_status()
        assert report.last_check == second
        assert report.last_check.timestamp > first.timestamp
        assert report.status == "healthy"

    async def test_no_probes_is_healthy(self, monitor):
        """Test an empty registry yields a healthy, empty snapshot."""
        snapshot = await monitor.run_health_checks()

        assert snapshot.results == {}
        assert snapshot.overall_healthy is True


class TestHealthStatus:
    """Test status reporting."""

    def test_status_before_first_run(self, monitor, clock):
        """Test status is healthy with no snapshot before any run."""
        report = monitor.get_health_status()

        assert report.status == "healthy"
        assert report.last_check is None
        assert report.timestamp == clock.now

    def test_register_replaces_probe(self, monitor):
        """Test registering an existing name keeps a single entry."""
        monitor.register_check("network", lambda: True)
        monitor.register_check("network", lambda: False)

        assert monitor.list_checks() == ["network"]


class TestDefaultProbes:
    """Test the built-in network, backend and memory probes."""

    def test_setup_default_checks(self, monitor):
        """Test the default probe names are registered."""
        monitor.setup_default_checks()

        assert monitor.list_checks() == ["network", "backend", "memory"]

    async def test_http_probe_without_url(self):
        """Test an unconfigured probe reports healthy."""
        assert await http_probe(None)() is True

    async def test_http_probe_status_codes(self):
        """Test server errors are unhealthy and other responses healthy."""
        client = AsyncMock()
        client.__aenter__.return_value = client
        client.__aexit__.return_value = False
        client.get.side_effect = [
            httpx.Response(200),
            httpx.Response(404),
            httpx.Response(503),
        ]

        with patch("linkguard.services.health_monitor.httpx.AsyncClient", return_value=client):
            probe = http_probe("https://backend.example.com/health")

            assert await probe() is True
            assert await probe() is True
            assert await probe() is False

    async def test_http_probe_transport_error(self):
        """Test a transport failure is reported as unhealthy."""
        client = AsyncMock()
        client.__aenter__.return_value = client
        client.__aexit__.return_value = False
        client.get.side_effect = httpx.ConnectError("connection refused")

        with patch("linkguard.services.health_monitor.httpx.AsyncClient", return_value=client):
            assert await http_probe("https://example.com")() is False

    def test_memory_probe_threshold(self):
        """Test memory usage above the threshold is unhealthy."""
        with patch("linkguard.services.health_monitor.psutil.virtual_memory") as vm:
            vm.return_value = MagicMock(percent=95.0)
            assert memory_probe(0.9)() is False

            vm.return_value = MagicMock(percent=40.0)
            assert memory_probe(0.9)() is True
