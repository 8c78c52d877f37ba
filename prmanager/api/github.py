"""GitHub account endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from prmanager.api.deps import get_github_client
from prmanager.api.errors import service_errors
from prmanager.api.schemas import AuthStatusResponse
from prmanager.github.client import GitHubClient
from prmanager.github.errors import GitHubServiceError
from prmanager.models import GitHubUser, RateLimit

router = APIRouter(prefix="/github", tags=["github"])
logger = structlog.get_logger(__name__)


@router.get("/user", response_model=GitHubUser)
async def current_user(client: GitHubClient = Depends(get_github_client)) -> GitHubUser:
    with service_errors():
        return await client.get_current_user()


@router.get("/rate-limit", response_model=RateLimit)
async def rate_limit(client: GitHubClient = Depends(get_github_client)) -> RateLimit:
    with service_errors():
        return await client.get_rate_limit()


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(client: GitHubClient = Depends(get_github_client)) -> AuthStatusResponse:
    """Report whether the GitHub credential works; never fails."""
    try:
        user = await client.get_current_user()
    except GitHubServiceError as exc:
        logger.info("GitHub not authenticated", code=exc.code)
        return AuthStatusResponse(authenticated=False, error=exc.message)
    return AuthStatusResponse(authenticated=True, user=user)
