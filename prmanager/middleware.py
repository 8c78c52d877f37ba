"""Request logging middleware and the JSON error envelope handlers."""

from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from prmanager.models import ErrorDetail, ErrorResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Fallback codes for HTTPExceptions raised without an envelope.
STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 2)


def error_response(
    status_code: int, code: str, message: str, details: Any = None
) -> JSONResponse:
    payload = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


async def request_logging_middleware(request: Request, call_next):
    """Bind a request id to every log line of the request and echo it back."""
    request_id = uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )
    started = time.monotonic()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Request failed", duration_ms=_elapsed_ms(started))
        raise
    else:
        logger.info(
            "Request handled",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        structlog.contextvars.clear_contextvars()


async def http_exception_handler(request: Request, exc: HTTPException):
    # raise_http_error already built the envelope.
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail)
    code = STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR")
    return error_response(exc.status_code, code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(422, "VALIDATION_ERROR", "Invalid request", jsonable_errors(exc))


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw ``ctx`` objects, which may not serialize."""
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
