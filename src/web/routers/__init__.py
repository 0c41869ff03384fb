"""
FastAPI Routers - Modular endpoint organization.

Router modules:
- calculations: Heir determination, statutory tax and actual division
- health: Liveness, readiness and calculation metrics
"""

from .health import router as health_router
from .calculations import router as calculations_router

__all__ = [
    "health_router",
    "calculations_router",
]
