"""Dependency providers for API endpoints.

Each returns a process-wide singleton; tests swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from prmanager.cache import TTLCache, cache
from prmanager.github.client import GitHubClient, github_client
from prmanager.opencode.manager import OpencodeManager, opencode_manager
from prmanager.settings import settings


def get_github_client() -> GitHubClient:
    return github_client


def get_opencode_manager() -> OpencodeManager:
    return opencode_manager


def get_cache() -> TTLCache:
    return cache


def get_repo_path() -> str:
    return settings.repo_path()
