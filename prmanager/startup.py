"""Startup helpers: log the UI URL and open it in a browser."""

from __future__ import annotations

import webbrowser

import structlog

logger = structlog.get_logger(__name__)


def ui_url(host: str, port: int, pr_number: int | None = None) -> str:
    """URL of the UI, optionally deep-linked to one pull request."""
    if host in ("0.0.0.0", "::", ""):
        host = "localhost"
    url = f"http://{host}:{port}/"
    if pr_number is not None:
        url = f"{url}pr/{pr_number}"
    return url


def log_ui_urls(host: str, port: int) -> None:
    logger.info("UI available", url=ui_url(host, port))


def open_browser(url: str) -> bool:
    """Open ``url`` in the default browser; returns False if none is available."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning("Could not open browser", url=url, error=str(exc))
        return False
    if opened:
        logger.info("Opened browser", url=url)
    else:
        logger.info("No browser available, open the UI manually", url=url)
    return opened
