"""Health endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from prmanager import __version__
from prmanager.api.deps import get_github_client, get_opencode_manager
from prmanager.api.schemas import GitHubHealth, HealthResponse, OpencodeStatusResponse
from prmanager.github.client import GitHubClient
from prmanager.github.errors import GitHubServiceError
from prmanager.opencode.manager import OpencodeManager

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)


async def opencode_status(manager: OpencodeManager) -> OpencodeStatusResponse:
    installed = manager.is_installed()
    version = await manager.get_version() if installed else None
    status = manager.status()
    return OpencodeStatusResponse(
        installed=installed,
        version=version,
        server_running=status.running,
        server_url=status.url,
    )


@router.get("/health", response_model=HealthResponse)
async def health(
    client: GitHubClient = Depends(get_github_client),
    manager: OpencodeManager = Depends(get_opencode_manager),
) -> HealthResponse:
    """Report GitHub authentication, OpenCode availability and the repository."""
    authenticated = await client.is_authenticated()
    repo = None
    if authenticated:
        try:
            repo = await client.repo_info()
        except GitHubServiceError as exc:
            logger.info("No GitHub repository for health check", error=exc.message)

    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        github=GitHubHealth(authenticated=authenticated),
        opencode=await opencode_status(manager),
        repo=repo,
    )
