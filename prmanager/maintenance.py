"""Background maintenance tasks for cache expiry."""

from __future__ import annotations

import asyncio

import structlog

from prmanager.cache import TTLCache, cache
from prmanager.settings import settings

logger = structlog.get_logger(__name__)


def run_maintenance(target: TTLCache = cache) -> int:
    """Run one maintenance pass and return the number of purged entries."""
    removed = target.purge_expired()
    if removed:
        logger.debug("Purged expired cache entries", count=removed)
    return removed


async def maintenance_loop(interval_s: float | None = None) -> None:
    """Periodically purge expired cache entries."""
    interval = interval_s if interval_s is not None else settings.cache_cleanup_seconds()
    while True:
        try:
            run_maintenance()
        except Exception:
            logger.exception("Maintenance loop failed")
        await asyncio.sleep(interval)
