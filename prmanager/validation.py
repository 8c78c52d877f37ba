"""Input validation for API path, query and body values."""

from __future__ import annotations

from typing import Any

from prmanager.models import PRState

MAX_PR_NUMBER = 999_999
MAX_FILE_PATH_LENGTH = 1000
MAX_LINE_NUMBER = 1_000_000


class InvalidInputError(ValueError):
    """A request value failed validation; ``code`` is returned to the client."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except (TypeError, ValueError):
        return None


def validate_pr_number(value: Any) -> int:
    """Return ``value`` as a PR number in ``1..MAX_PR_NUMBER``.

    Raises:
        InvalidInputError: With code ``INVALID_PR_NUMBER``.
    """
    number = _as_int(value)
    if number is None or not 1 <= number <= MAX_PR_NUMBER:
        raise InvalidInputError("Invalid PR number", "INVALID_PR_NUMBER")
    return number


def validate_file_path(path: Any) -> str:
    """Reject repository paths that could escape the work tree.

    Raises:
        InvalidInputError: With code ``INVALID_FILE_PATH``.
    """
    if not path or not isinstance(path, str):
        raise InvalidInputError("Invalid file path", "INVALID_FILE_PATH")
    if ".." in path or path.startswith("/"):
        raise InvalidInputError(
            "Invalid file path: directory traversal not allowed", "INVALID_FILE_PATH"
        )
    if len(path) > MAX_FILE_PATH_LENGTH:
        raise InvalidInputError("File path too long", "INVALID_FILE_PATH")
    if "\0" in path:
        raise InvalidInputError(
            "Invalid file path: null bytes not allowed", "INVALID_FILE_PATH"
        )
    return path


def validate_state(state: Any) -> PRState:
    """Normalize a PR list filter, falling back to ``open``."""
    if not state or not isinstance(state, str):
        return PRState.OPEN
    try:
        return PRState(state.strip().lower())
    except ValueError:
        return PRState.OPEN


def validate_line_number(value: Any) -> int | None:
    """Return a usable editor line number or None."""
    if value is None:
        return None
    number = _as_int(value)
    if number is None or not 1 <= number <= MAX_LINE_NUMBER:
        return None
    return number
