"""AI chat endpoints backed by the local OpenCode server."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Depends

from prmanager.api.deps import get_github_client, get_opencode_manager, get_repo_path
from prmanager.api.errors import raise_http_error, service_errors
from prmanager.api.health import opencode_status
from prmanager.api.schemas import ChatRequest, ChatResponse, OkResponse, OpencodeStatusResponse
from prmanager.github.client import GitHubClient
from prmanager.github.repo import get_repo_root
from prmanager.opencode.manager import OpencodeManager
from prmanager.opencode.prompts import build_context_prompt
from prmanager.validation import validate_pr_number

router = APIRouter(prefix="/opencode", tags=["opencode"])
logger = structlog.get_logger(__name__)


@router.post("/chat", response_model=ChatResponse)
async def start_chat(
    payload: ChatRequest,
    client: GitHubClient = Depends(get_github_client),
    manager: OpencodeManager = Depends(get_opencode_manager),
    repo_path: str = Depends(get_repo_path),
) -> ChatResponse:
    """Start OpenCode for the repository and open a chat seeded with PR context."""
    with service_errors():
        pr_number = validate_pr_number(payload.pr_number)
        if not manager.is_installed():
            raise_http_error(
                "NOT_INSTALLED",
                "OpenCode is not installed",
                503,
                {"install_url": "https://opencode.ai"},
            )

        repo_root = await asyncio.to_thread(get_repo_root, repo_path)
        server_url = await manager.start_server(repo_root)

        pr, comments = await asyncio.gather(
            client.get_pr_detail(pr_number),
            client.get_pr_comments(pr_number),
        )
        prompt = build_context_prompt(pr, comments)
        logger.info(
            "Built PR context prompt",
            pr_number=pr_number,
            prompt_length=len(prompt),
            comment_count=len(comments),
        )
        session_id = await manager.spawn_tui(prompt)

    return ChatResponse(
        message="OpenCode chat session started",
        server_url=server_url,
        session_id=session_id,
    )


@router.get("/status", response_model=OpencodeStatusResponse)
async def status(
    manager: OpencodeManager = Depends(get_opencode_manager),
) -> OpencodeStatusResponse:
    return await opencode_status(manager)


@router.post("/stop", response_model=OkResponse)
async def stop(manager: OpencodeManager = Depends(get_opencode_manager)) -> OkResponse:
    await manager.stop()
    return OkResponse(message="OpenCode server stopped")
