"""
Error handling for the HTTP layer.

Every error that is not a domain validation failure leaves the service in
one envelope:

    {"error": true, "code": ..., "message": ..., "details": {...}, "timestamp": ...}
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for consistent client handling."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CALCULATION_ERROR = "CALCULATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class InheritanceTaxError(Exception):
    """Raised by the web layer for failures outside domain validation."""
    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        # Shown to the client
        self.user_message = user_message or message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "code": self.code.value,
            "message": self.user_message,
            "details": self.details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
    user_message: Optional[str] = None
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "code": code.value,
            "message": user_message or message,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


async def inheritance_tax_error_handler(request: Request, exc: InheritanceTaxError):
    logger.warning(f"InheritanceTaxError: {exc.code.value} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with readable messages."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    return create_error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message="Invalid request data",
        status_code=422,
        details={"validation_errors": errors},
        user_message="Please check your input. Some values appear to be invalid."
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return create_error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message=str(exc.detail),
        status_code=exc.status_code,
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}\n{traceback.format_exc()}")
    return create_error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        status_code=500,
        details={"type": type(exc).__name__},
        user_message="Something went wrong. Please try again."
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InheritanceTaxError, inheritance_tax_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
