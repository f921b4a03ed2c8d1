# marketplace/adapters/api/errors.py
"""
Maps exceptions to JSON error bodies.

Every error response has the shape ``{"error": <message>, "code": <CODE>}``;
insufficient stock adds ``productId`` and other domain errors add
``details`` when they carry any.
"""

from typing import Any, Dict, List

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.core.domain.exceptions import DomainError, InsufficientStockError

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "Something went wrong"

# SQLSTATE class 23 code for unique_violation.
_UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate entry", "duplicate key")

# Request sections FastAPI prefixes onto error locations.
_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


def format_request_errors(exc: RequestValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOCATION_ROOTS]
        path = ".".join(loc) or "request"
        messages.append(f"{path}: {err.get('msg', 'Invalid value')}")
    return messages


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when the driver reports a unique or primary-key clash.

    PostgreSQL drivers expose the SQLSTATE; SQLite and MySQL only say so in
    the message.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    message = str(orig).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


def domain_error_body(exc: DomainError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": exc.message, "code": exc.code}
    if isinstance(exc, InsufficientStockError):
        body["productId"] = exc.product_id
    elif exc.details:
        body["details"] = exc.details
    return body


def register_exception_handlers(app: FastAPI, expose_internal_errors: bool = False) -> None:
    """
    ``expose_internal_errors`` puts the raw message of unexpected exceptions
    into the 500 body; production keeps it generic.
    """

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log("domain_error", path=request.url.path, code=exc.code, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=domain_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = format_request_errors(exc)
        logger.info("request_validation_failed", path=request.url.path, errors=details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "code": "VALIDATION_ERROR", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "code": f"HTTP_{exc.status_code}"},
            headers=getattr(exc, "headers", None),
        )

    def internal_error_response(exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": str(exc) if expose_internal_errors else GENERIC_ERROR_MESSAGE,
                "code": "INTERNAL_SERVER_ERROR",
            },
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        if not is_unique_violation(exc):
            # Foreign-key, not-null or check failures are server-side bugs.
            logger.error("integrity_error", path=request.url.path, error=str(exc.orig))
            return internal_error_response(exc)
        logger.warning("duplicate_entry", path=request.url.path, error=str(exc.orig))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Duplicate entry", "code": "DUPLICATE_ENTRY"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", path=request.url.path)
        return internal_error_response(exc)
