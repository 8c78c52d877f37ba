"""Shared error helpers for API responses."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import structlog
from fastapi import HTTPException

from prmanager.github.errors import GitHubServiceError
from prmanager.models import ErrorDetail, ErrorResponse
from prmanager.opencode.manager import OpencodeServiceError
from prmanager.validation import InvalidInputError

logger = structlog.get_logger(__name__)

# OpenCode codes that mean the feature is unavailable rather than broken.
OPENCODE_UNAVAILABLE_CODES = frozenset({"NOT_INSTALLED", "NOT_FOUND"})


def raise_http_error(
    code: str,
    message: str,
    status_code: int,
    details: Any = None,
) -> NoReturn:
    """Raise an HTTPException with a structured error payload.

    Args:
        code: Stable error code string.
        message: Human-readable error message.
        status_code: HTTP status to return.
        details: Optional extra context for the client.
    """
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error=ErrorDetail(code=code, message=message, details=details)
        ).model_dump(),
    )


def opencode_status_code(exc: OpencodeServiceError) -> int:
    return 503 if exc.code in OPENCODE_UNAVAILABLE_CODES else 500


@contextmanager
def service_errors() -> Iterator[None]:
    """Convert service and validation exceptions into HTTP errors."""
    try:
        yield
    except InvalidInputError as exc:
        raise_http_error(exc.code, exc.message, 400)
    except GitHubServiceError as exc:
        logger.warning("GitHub service error", code=exc.code, error=exc.message)
        raise_http_error(exc.code, exc.message, exc.status_code or 500)
    except OpencodeServiceError as exc:
        logger.warning("OpenCode service error", code=exc.code, error=exc.message)
        raise_http_error(exc.code, exc.message, opencode_status_code(exc), exc.details)
