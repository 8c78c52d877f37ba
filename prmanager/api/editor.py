"""Open repository files in the local VS Code instance."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends

from prmanager.api.deps import get_repo_path
from prmanager.api.errors import raise_http_error, service_errors
from prmanager.api.schemas import OkResponse, OpenInEditorRequest
from prmanager.github.repo import get_repo_root
from prmanager.validation import validate_file_path, validate_line_number

router = APIRouter(tags=["editor"])
logger = structlog.get_logger(__name__)

EDITOR_COMMAND = "code"


def editor_target(repo_root: str, file_path: str, line: int | None) -> str:
    """Build the ``--goto`` argument: ``<abs path>[:<line>:1]``."""
    target = str(Path(repo_root) / file_path)
    if line:
        target = f"{target}:{line}:1"
    return target


@router.post("/open-in-editor", response_model=OkResponse)
async def open_in_editor(
    payload: OpenInEditorRequest,
    repo_path: str = Depends(get_repo_path),
) -> OkResponse:
    with service_errors():
        file_path = validate_file_path(payload.file_path)
        line = validate_line_number(payload.line)
        repo_root = await asyncio.to_thread(get_repo_root, repo_path)

    editor = shutil.which(EDITOR_COMMAND)
    if not editor:
        raise_http_error(
            "EDITOR_NOT_FOUND",
            "VSCode CLI not found. Please install VSCode command line tools.",
            500,
            'Open VSCode and run: Shell Command: Install "code" command in PATH',
        )

    target = editor_target(repo_root, file_path, line)
    proc = await asyncio.create_subprocess_exec(
        editor,
        "--goto",
        target,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        logger.warning("Editor command failed", target=target, exit_code=proc.returncode)
        raise_http_error("EDITOR_FAILED", "Failed to open file in editor", 500, message or None)

    logger.info("Opened file in editor", file_path=file_path, line=line)
    suffix = f" at line {line}" if line else ""
    return OkResponse(message=f"Opened {file_path}{suffix} in VSCode")
