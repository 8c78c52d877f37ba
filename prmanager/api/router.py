"""Composition of API routers."""

from __future__ import annotations

from fastapi import APIRouter

from prmanager.api.editor import router as editor_router
from prmanager.api.github import router as github_router
from prmanager.api.health import router as health_router
from prmanager.api.opencode import router as opencode_router
from prmanager.api.prs import router as prs_router
from prmanager.api.spa import router as spa_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(prs_router)
api_router.include_router(github_router)
api_router.include_router(opencode_router)
api_router.include_router(editor_router)

root_router = APIRouter()
root_router.include_router(spa_router)
