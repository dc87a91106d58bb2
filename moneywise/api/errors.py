"""Translate domain and request errors into the {msg, error?} JSON envelope"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from moneywise.domain.exceptions import (
    ConflictError,
    CurrencyConversionError,
    DomainException,
    InsufficientFundsError,
    NotFoundError,
    NotificationDeliveryError,
    ReportRenderingError,
    UpstreamError,
    ValidationError,
)

# Checked in order; subclasses before their parents
STATUS_CODES = [
    (ValidationError, 400),
    (InsufficientFundsError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ReportRenderingError, 500),
    (UpstreamError, 502),
]

UPSTREAM_MESSAGES = {
    CurrencyConversionError: "Error converting currency",
    NotificationDeliveryError: "Error sending notification",
    ReportRenderingError: "Error rendering report",
}


class OperationFailed(Exception):
    """Unexpected fault inside an endpoint, reported as 500 with the cause"""

    def __init__(self, msg: str, error: str):
        super().__init__(msg)
        self.msg = msg
        self.error = error


def parse_id(value: str, label: str) -> uuid.UUID:
    """Parse a path identifier or fail with a 400"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {label} ID format")


@contextmanager
def operation(db: Session, failure_msg: str, request_id: Optional[str] = None) -> Iterator[None]:
    """
    Run an endpoint body; roll back the session on any failure.

    Domain errors, HTTP errors and OperationFailed propagate unchanged;
    anything else becomes OperationFailed(failure_msg) carrying the
    original error text.
    """
    try:
        yield
    except (DomainException, StarletteHTTPException, OperationFailed):
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logging.error(f"{failure_msg}: {e}", extra={"request_id": request_id})
        raise OperationFailed(failure_msg, str(e)) from e


@contextmanager
def unique_or_conflict(db: Session, conflict_msg: str) -> Iterator[None]:
    """Turn a unique-constraint violation raised while writing into ConflictError"""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(conflict_msg) from e


def _status_for(exc: DomainException) -> int:
    for exc_type, status in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status
    return 500


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    if first.get("type") == "value_error" and "error" in first.get("ctx", {}):
        return str(first["ctx"]["error"])

    field = next((str(part) for part in reversed(first.get("loc", ())) if not isinstance(part, int)), "body")
    return f'"{field}" {first.get("msg", "is invalid")}'


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def handle_domain_exception(request: Request, exc: DomainException):
        status = _status_for(exc)
        if isinstance(exc, UpstreamError):
            msg = next((m for t, m in UPSTREAM_MESSAGES.items() if isinstance(exc, t)), exc.message)
            logging.error(f"Upstream failure: {exc.message}", extra={"request_id": getattr(request.state, "request_id", None)})
            return JSONResponse(status_code=status, content={"msg": msg, "error": exc.message})
        return JSONResponse(status_code=status, content={"msg": exc.message, **exc.details})

    @app.exception_handler(OperationFailed)
    async def handle_operation_failed(request: Request, exc: OperationFailed):
        return JSONResponse(status_code=500, content={"msg": exc.msg, "error": exc.error})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"msg": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"msg": exc.detail}, headers=exc.headers)
