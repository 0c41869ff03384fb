"""
Health Check and Monitoring Endpoints

Provides:
1. /health - Service status, uptime and calculation metrics
2. /health/live - Simple liveness probe (for k8s)
3. /health/ready - Readiness probe (for k8s)
"""

import time
import logging
from datetime import datetime, timezone
from typing import Dict, Any
from collections import defaultdict
import threading

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Application start time for uptime calculation
_start_time = datetime.now(timezone.utc)

# Thread-safe calculation metrics tracking
_metrics_lock = threading.Lock()
_calculation_metrics: Dict[str, Any] = {
    "total_calculations": 0,
    "failed_validations": 0,
    "validation_errors": 0,
    "average_calculation_ms": 0.0,
    "calculations_by_operation": defaultdict(int),
}


def record_calculation(operation: str, success: bool = True,
                       validation_errors: int = 0, latency_ms: float = 0.0):
    """
    Record calculation metrics.

    Call this after an operation completes:
        from web.routers.health import record_calculation
        record_calculation("tax_amount", success=True, latency_ms=1.2)

    Args:
        operation: heirs, tax_amount or actual_division
        success: Whether the operation produced a result
        validation_errors: Number of validation errors reported
        latency_ms: Calculation time in milliseconds
    """
    with _metrics_lock:
        _calculation_metrics["total_calculations"] += 1
        if not success:
            _calculation_metrics["failed_validations"] += 1
        _calculation_metrics["validation_errors"] += validation_errors
        _calculation_metrics["calculations_by_operation"][operation] += 1

        # Update running average
        total = _calculation_metrics["total_calculations"]
        current_avg = _calculation_metrics["average_calculation_ms"]
        _calculation_metrics["average_calculation_ms"] = (
            (current_avg * (total - 1) + latency_ms) / total
        )


def get_calculation_metrics() -> Dict[str, Any]:
    """Get a snapshot of calculation metrics (thread-safe)."""
    with _metrics_lock:
        snapshot = dict(_calculation_metrics)
        snapshot["calculations_by_operation"] = dict(_calculation_metrics["calculations_by_operation"])
        snapshot["average_calculation_ms"] = round(snapshot["average_calculation_ms"], 3)
        return snapshot


def reset_metrics() -> None:
    """Reset all counters. Intended for tests."""
    with _metrics_lock:
        _calculation_metrics["total_calculations"] = 0
        _calculation_metrics["failed_validations"] = 0
        _calculation_metrics["validation_errors"] = 0
        _calculation_metrics["average_calculation_ms"] = 0.0
        _calculation_metrics["calculations_by_operation"] = defaultdict(int)


def _uptime_seconds() -> float:
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


@router.get("/health")
async def health_check():
    """
    Service health with uptime and calculation metrics.

    The engine has no external dependencies, so a running process is a
    healthy process.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.name,
        "version": settings.version,
        "environment": settings.environment,
        "uptime_seconds": round(_uptime_seconds(), 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "calculations": get_calculation_metrics(),
    }


@router.get("/health/live")
async def liveness_probe():
    """Liveness probe - the process is up."""
    return {"status": "alive", "timestamp": time.time()}


@router.get("/health/ready")
async def readiness_probe():
    """
    Readiness probe - the statutory tables load.

    Returns 503 if the tax configuration cannot be built from settings.
    """
    try:
        config = get_settings().tax_config()
    except ValueError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not_ready", "error": str(e)})
    return {"status": "ready", "tax_table_rows": len(config.tax_table)}
