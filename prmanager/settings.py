"""Centralized environment configuration for the RPM server.

All environment variables are read through this module using the RPM_
prefix for consistency.

Usage:
    from prmanager.settings import settings

    port = settings.port()
"""

from __future__ import annotations

import os


def _get(name: str, default: str = "") -> str:
    """Get an environment variable value."""
    return os.environ.get(name, "").strip() or default


def _get_int(name: str, default: int = 0) -> int:
    """Get an integer environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float = 0.0) -> float:
    """Get a float environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Settings:
    """Centralized settings for the RPM server.

    Environment variables use the RPM_ prefix.
    """

    # -------------------------------------------------------------------------
    # Server Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def host() -> str:
        """Host to bind the HTTP server to.

        Env: RPM_HOST (default: 127.0.0.1)
        """
        return _get("RPM_HOST", default="127.0.0.1")

    @staticmethod
    def port() -> int:
        """Port to bind the HTTP server to.

        Env: RPM_PORT (default: 3000)
        """
        return _get_int("RPM_PORT", default=3000)

    @staticmethod
    def allowed_origins() -> list[str]:
        """Comma-separated CORS origins allowed to call the API.

        Env: RPM_ALLOWED_ORIGINS (default: Vite dev server and local server)
        """
        raw = _get("RPM_ALLOWED_ORIGINS")
        if not raw:
            return ["http://localhost:5173", "http://localhost:3000"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @staticmethod
    def repo_path() -> str:
        """Repository the server reviews. Empty means the current directory.

        Env: RPM_REPO_PATH
        """
        value = _get("RPM_REPO_PATH")
        return os.path.abspath(os.path.expanduser(value)) if value else os.getcwd()

    @staticmethod
    def open_browser() -> bool:
        """Open the UI in a browser once the server is up.

        Env: RPM_OPEN_BROWSER (default: false)
        """
        return _get("RPM_OPEN_BROWSER").lower() in ("1", "true", "yes")

    @staticmethod
    def open_pr() -> int | None:
        """Pull request the browser should open on, if any.

        Env: RPM_OPEN_PR
        """
        value = _get_int("RPM_OPEN_PR", default=0)
        return value if value > 0 else None

    # -------------------------------------------------------------------------
    # Logging Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

        Env: RPM_LOG_LEVEL (default: INFO)
        """
        return _get("RPM_LOG_LEVEL", default="INFO").upper()

    @staticmethod
    def log_format() -> str:
        """Log format: "console" for dev-friendly, "json" for structured.

        Env: RPM_LOG_FORMAT (default: console)
        """
        return _get("RPM_LOG_FORMAT", default="console").lower()

    # -------------------------------------------------------------------------
    # Cache Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def cache_ttl_seconds() -> float:
        """Default lifetime of cached GitHub responses.

        Env: RPM_CACHE_TTL_SECONDS (default: 300)
        """
        return _get_float("RPM_CACHE_TTL_SECONDS", default=300.0)

    @staticmethod
    def cache_cleanup_seconds() -> float:
        """Interval between sweeps of expired cache entries.

        Env: RPM_CACHE_CLEANUP_SECONDS (default: 60)
        """
        return _get_float("RPM_CACHE_CLEANUP_SECONDS", default=60.0)

    # -------------------------------------------------------------------------
    # GitHub Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def github_token() -> str:
        """GitHub token used when ``gh auth token`` is unavailable.

        Env: GITHUB_TOKEN (no prefix - external service credential)
        """
        return os.environ.get("GITHUB_TOKEN", "").strip()

    @staticmethod
    def github_api_url() -> str:
        """Base URL of the GitHub REST API.

        Env: RPM_GITHUB_API_URL (default: https://api.github.com)
        """
        return _get("RPM_GITHUB_API_URL", default="https://api.github.com").rstrip("/")

    @staticmethod
    def github_timeout_seconds() -> float:
        """Per-request timeout for GitHub API calls.

        Env: RPM_GITHUB_TIMEOUT_SECONDS (default: 10)
        """
        return _get_float("RPM_GITHUB_TIMEOUT_SECONDS", default=10.0)

    # -------------------------------------------------------------------------
    # OpenCode Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def opencode_bin() -> str:
        """OpenCode executable name or path.

        Env: RPM_OPENCODE_BIN (default: opencode)
        """
        return _get("RPM_OPENCODE_BIN", default="opencode")

    @staticmethod
    def opencode_startup_timeout_seconds() -> float:
        """How long to wait for ``opencode serve`` to answer HTTP.

        Env: RPM_OPENCODE_STARTUP_TIMEOUT_SECONDS (default: 10)
        """
        return _get_float("RPM_OPENCODE_STARTUP_TIMEOUT_SECONDS", default=10.0)

    @staticmethod
    def opencode_provider() -> str:
        """Provider id sent with chat prompts.

        Env: RPM_OPENCODE_PROVIDER (default: github-copilot)
        """
        return _get("RPM_OPENCODE_PROVIDER", default="github-copilot")

    @staticmethod
    def opencode_model() -> str:
        """Model id sent with chat prompts.

        Env: RPM_OPENCODE_MODEL (default: gpt-4.1)
        """
        return _get("RPM_OPENCODE_MODEL", default="gpt-4.1")


# Singleton instance for convenient imports
settings = Settings()
