"""
Health Monitor component.

Runs named probes of external dependencies and resources and keeps the last
aggregate verdict for diagnostics. Health checks never trigger recovery.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

import httpx
import psutil

from linkguard.models.health import (
    HealthCheckResult,
    HealthSnapshot,
    HealthStatusReport,
    ProbeStatus,
)
from linkguard.services.error_log import utc_now
from linkguard.utils.logging import get_logger
from linkguard.utils.metrics import emit_metric
from linkguard.utils.resilience import maybe_await

logger = get_logger(__name__)

Probe = Callable[[], Any]


class HealthMonitor:
    """Registry of health probes and holder of the last snapshot."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._checks: Dict[str, Probe] = {}
        self._clock = clock
        self.last_health_check: Optional[HealthSnapshot] = None
        self.health_status = "healthy"

    def register_check(self, name: str, probe: Probe) -> None:
        """
        Register a probe. Registering an existing name replaces the probe.

        Args:
            name: Probe name
            probe: No-argument sync or async callable returning a truthy value
                when healthy, or raising
        """
        if name in self._checks:
            logger.debug(f"Replacing health check '{name}'")
        self._checks[name] = probe

    def list_checks(self) -> list[str]:
        """Registered probe names in registration order."""
        return list(self._checks)

    async def run_health_checks(self) -> HealthSnapshot:
        """
        Run every registered probe.

        Each probe is isolated: a raising probe is recorded as ``error`` and the
        remaining probes still run.

        Returns:
            The new HealthSnapshot, which replaces the stored one
        """
        results: Dict[str, HealthCheckResult] = {}

        for name, probe in list(self._checks.items()):
            try:
                result = await maybe_await(probe())
                status = ProbeStatus.HEALTHY if result else ProbeStatus.UNHEALTHY
                results[name] = HealthCheckResult(status=status, result=_payload(result))
            except Exception as e:
                logger.warning(f"Health check '{name}' raised: {e}", extra={"probe": name})
                results[name] = HealthCheckResult(
                    status=ProbeStatus.ERROR,
                    error=str(e) or type(e).__name__
                )

        overall_healthy = all(r.status == ProbeStatus.HEALTHY for r in results.values())

        snapshot = HealthSnapshot(
            timestamp=self._clock(),
            results=results,
            overall_healthy=overall_healthy,
        )

        self.last_health_check = snapshot
        self.health_status = "healthy" if overall_healthy else "unhealthy"
        emit_metric("health_check", 1 if overall_healthy else 0, probes=len(results))

        return snapshot

    def get_health_status(self) -> HealthStatusReport:
        """
        Get the current aggregate status and the last snapshot.

        Returns:
            HealthStatusReport; status is "healthy" before the first run
        """
        return HealthStatusReport(
            status=self.health_status,
            last_check=self.last_health_check,
            timestamp=self._clock(),
        )

    def setup_default_checks(
        self,
        connectivity_url: Optional[str] = None,
        backend_health_url: Optional[str] = None,
        memory_threshold: float = 0.9,
        timeout: float = 5.0
    ) -> None:
        """
        Register the default probes: network, backend and memory.

        Probes whose signal is not configured report healthy.

        Args:
            connectivity_url: URL used to test general network reachability
            backend_health_url: Health endpoint of the document-sync backend
            memory_threshold: Maximum healthy memory usage ratio
            timeout: HTTP probe timeout in seconds
        """
        self.register_check("network", http_probe(connectivity_url, timeout))
        self.register_check("backend", http_probe(backend_health_url, timeout))
        self.register_check("memory", memory_probe(memory_threshold))


def http_probe(url: Optional[str], timeout: float = 5.0) -> Probe:
    """
    Build a probe that is healthy when ``url`` answers without a server error.

    Args:
        url: URL to request; None makes the probe always healthy
        timeout: Request timeout in seconds

    Returns:
        Async probe callable
    """
    async def _probe() -> bool:
        if not url:
            return True
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"Probe request to {url} failed: {e}")
            return False
        return response.status_code < 500

    return _probe


def memory_probe(threshold: float = 0.9) -> Probe:
    """
    Build a probe that is healthy while memory usage stays below ``threshold``.

    Args:
        threshold: Maximum healthy used/total ratio

    Returns:
        Sync probe callable
    """
    def _probe() -> bool:
        try:
            usage = psutil.virtual_memory().percent / 100
        except (OSError, AttributeError, NotImplementedError):
            return True
        return usage < threshold

    return _probe


def _payload(result: Any) -> Any:
    """Keep JSON-friendly probe results; summarize anything else."""
    if result is None or isinstance(result, (bool, int, float, str, list, dict)):
        return result
    return repr(result)
