"""Shared pytest fixtures for RPM tests."""

import os
from typing import AsyncGenerator

import httpx
import pytest

# Ensure host machine credentials and config do not affect test results.
for k in [key for key in os.environ if key.startswith("RPM_")] + ["GITHUB_TOKEN"]:
    os.environ.pop(k, None)

from prmanager.api.deps import (
    get_cache,
    get_github_client,
    get_opencode_manager,
    get_repo_path,
)
from prmanager.cache import TTLCache
from prmanager.main import app
from rpm_fixtures import SAMPLE_DIFF, FakeGitHubAPI, FakeOpencodeManager


@pytest.fixture
def sample_diff() -> str:
    return SAMPLE_DIFF


@pytest.fixture
def github_api() -> FakeGitHubAPI:
    """Fake GitHub API that already serves PR #42 with the sample diff."""
    api = FakeGitHubAPI()
    api.add_pull(42)
    return api


@pytest.fixture
def fake_opencode() -> FakeOpencodeManager:
    return FakeOpencodeManager()


@pytest.fixture
def fresh_cache() -> TTLCache:
    return TTLCache(default_ttl=60.0)


@pytest.fixture
def repo_path(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture
async def api_client(
    github_api: FakeGitHubAPI,
    fake_opencode: FakeOpencodeManager,
    fresh_cache: TTLCache,
    repo_path: str,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client with GitHub, OpenCode and the cache swapped for fakes."""
    client = github_api.client()
    app.dependency_overrides[get_github_client] = lambda: client
    app.dependency_overrides[get_opencode_manager] = lambda: fake_opencode
    app.dependency_overrides[get_cache] = lambda: fresh_cache
    app.dependency_overrides[get_repo_path] = lambda: repo_path
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.clear()
        await client.close()


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force the AnyIO pytest plugin to run tests under asyncio.

    The server is asyncio-native (FastAPI/uvicorn, asyncio subprocesses), so
    the trio backend is not supported.
    """
    return "asyncio"
