"""Local OpenCode server used for AI-assisted review chat."""

from prmanager.opencode.manager import (
    OpencodeManager,
    OpencodeServiceError,
    ServerStatus,
    opencode_manager,
)
from prmanager.opencode.prompts import build_context_prompt

__all__ = [
    "OpencodeManager",
    "OpencodeServiceError",
    "ServerStatus",
    "build_context_prompt",
    "opencode_manager",
]
