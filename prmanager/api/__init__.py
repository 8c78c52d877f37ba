"""API package for pull request review endpoints."""

from __future__ import annotations

from prmanager.api.router import api_router, root_router

__all__ = ["api_router", "root_router"]
