"""Error types raised by the GitHub service layer."""

from __future__ import annotations


class GitHubServiceError(Exception):
    """A GitHub call failed; ``code`` is stable and safe to show to API clients."""

    def __init__(self, message: str, code: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class GitHubAuthError(GitHubServiceError):
    """No usable GitHub credential could be found."""

    def __init__(self, message: str, code: str = "AUTH_REQUIRED") -> None:
        super().__init__(message, code, 401)
