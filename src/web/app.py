"""
FastAPI application for the inheritance tax calculator.

Routes:
- POST /api/calculation/heirs           : statutory heirs and shares
- POST /api/calculation/tax-amount      : aggregate tax, statutory-share method
- POST /api/calculation/actual-division : per-person final tax
- GET  /api/calculation/tax-table       : quick-reference table in effect
- GET  /health, /health/live, /health/ready
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, get_settings
from middleware.request_context import RequestContextMiddleware
from services.logging_config import configure_logging
from web.errors import register_exception_handlers
from web.routers import calculations_router, health_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application from settings."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title=settings.name,
        version=settings.version,
        description="Japanese inheritance tax: heirs, statutory-share tax and actual division",
        debug=settings.debug,
    )

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    # =========================================================================
    # ERROR HANDLING
    # =========================================================================

    register_exception_handlers(app)

    # =========================================================================
    # ROUTERS
    # =========================================================================

    app.include_router(health_router)
    app.include_router(calculations_router)

    logger.info(
        f"{settings.name} {settings.version} started "
        f"(environment={settings.environment}, reduction={settings.spousal_reduction_method.value})"
    )
    return app


app = create_app()
