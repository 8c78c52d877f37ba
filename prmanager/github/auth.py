"""GitHub credential discovery.

Reuses the user's existing ``gh`` CLI login so no separate API key has to be
configured; ``GITHUB_TOKEN`` is the fallback.
"""

from __future__ import annotations

import subprocess

import structlog

from prmanager.github.errors import GitHubAuthError
from prmanager.settings import settings

logger = structlog.get_logger(__name__)

# Shorter output from `gh auth token` is an error message, not a token.
MIN_TOKEN_LENGTH = 20


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as exc:
        logger.debug("gh auth token unavailable", error=str(exc))
        return None
    if result.returncode != 0:
        return None
    token = result.stdout.strip()
    if len(token) < MIN_TOKEN_LENGTH:
        return None
    return token


def get_github_token() -> str:
    """Return a GitHub token from ``gh auth token`` or ``GITHUB_TOKEN``.

    Raises:
        GitHubAuthError: When neither source yields a token.
    """
    token = _token_from_gh_cli()
    if token:
        return token
    token = settings.github_token()
    if token:
        return token
    raise GitHubAuthError("Could not get GitHub token. Please run: gh auth login")
