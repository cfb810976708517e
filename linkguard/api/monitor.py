"""
Monitor diagnostics REST API endpoints.

Backs the developer debug panel and the supervisor's recovery actions.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Header, Query, Request

from linkguard.config import settings
from linkguard.models.api_response import ClearResponse, ErrorSummaryResponse, RecoveryResponse
from linkguard.models.error import ErrorRecord, ErrorReport
from linkguard.models.health import HealthSnapshot, HealthStatusReport
from linkguard.models.recovery import SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monitor", tags=["monitor"])


def get_system(request: Request):
    """
    Resolve the resilience system built at startup.

    Raises:
        HTTPException: If the system has not been built yet
    """
    system = getattr(request.app.state, "system", None)
    if system is None:
        raise HTTPException(status_code=503, detail="Monitor not initialized")
    return system


async def verify_api_key(x_api_key: str = Header(None)) -> None:
    """
    Verify API key when one is configured.

    Args:
        x_api_key: API key from request header

    Raises:
        HTTPException: If API key is invalid or missing
    """
    expected_key = settings.admin_api_key
    if not expected_key:
        return

    if not x_api_key:
        raise HTTPException(status_code=401, detail="API key required")

    if x_api_key != expected_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _recovery_response(system, recovered: bool) -> RecoveryResponse:
    return RecoveryResponse(
        recovered=recovered,
        recovery_attempts=system.coordinator.recovery_attempts,
        max_recovery_attempts=system.coordinator.max_recovery_attempts,
    )


@router.get("/status", response_model=SystemStatus, dependencies=[Depends(verify_api_key)])
async def get_system_status(system=Depends(get_system)) -> SystemStatus:
    """Diagnostic snapshot: crash status, health status, recent errors."""
    return system.get_system_status()


@router.get("/errors", response_model=List[ErrorRecord], dependencies=[Depends(verify_api_key)])
async def list_recent_errors(
    count: int = Query(10, ge=1, le=1000),
    system=Depends(get_system)
) -> List[ErrorRecord]:
    """Most recent errors, oldest first."""
    return system.error_log.get_recent_errors(count)


@router.get("/errors/summary", response_model=ErrorSummaryResponse, dependencies=[Depends(verify_api_key)])
async def get_error_summary(system=Depends(get_system)) -> ErrorSummaryResponse:
    """Occurrence counts over the retained log."""
    return ErrorSummaryResponse(
        total=len(system.error_log),
        summary=system.error_log.get_error_summary(),
    )


@router.post("/errors", response_model=ErrorRecord, status_code=201)
async def report_error(report: ErrorReport, system=Depends(get_system)) -> ErrorRecord:
    """
    Record a failure reported by a client screen.

    Args:
        report: Failure details

    Returns:
        The stored record
    """
    error: Dict[str, object] = {
        "message": report.message,
        "code": report.code,
        "stack": report.stack,
    }
    return system.log_error(error, report.context, report.metadata)


@router.delete("/errors", response_model=ClearResponse, dependencies=[Depends(verify_api_key)])
async def clear_errors(system=Depends(get_system)) -> ClearResponse:
    """Empty the error log."""
    system.error_log.clear_errors()
    logger.info("Error log cleared via API")
    return ClearResponse(status="cleared", message="Error log cleared")


@router.post("/recovery", response_model=RecoveryResponse, dependencies=[Depends(verify_api_key)])
async def force_recovery(system=Depends(get_system)) -> RecoveryResponse:
    """Run one recovery cycle ("Force Recovery")."""
    recovered = await system.attempt_recovery()
    return _recovery_response(system, recovered)


@router.post("/recovery/reset", response_model=RecoveryResponse, dependencies=[Depends(verify_api_key)])
async def reset_recovery(system=Depends(get_system)) -> RecoveryResponse:
    """Zero the recovery attempt count ("Try Again")."""
    system.reset_recovery()
    return _recovery_response(system, False)


@router.get("/health", response_model=HealthStatusReport, dependencies=[Depends(verify_api_key)])
async def get_health_status(system=Depends(get_system)) -> HealthStatusReport:
    """Last health verdict without running the probes."""
    return system.health_monitor.get_health_status()


@router.post("/health/run", response_model=HealthSnapshot, dependencies=[Depends(verify_api_key)])
async def run_health_checks(system=Depends(get_system)) -> HealthSnapshot:
    """Run every probe now."""
    try:
        return await system.health_monitor.run_health_checks()
    except Exception as e:
        logger.error(f"Error running health checks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
