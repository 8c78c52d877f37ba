"""Pydantic request/response models for API endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from prmanager.diff import ChangeType, DiffSides, FileDiffFragment, RenderedDiff
from prmanager.models import GitHubUser, RepoInfo

# --- Request Models ---


class ChatRequest(BaseModel):
    """Request body for starting an AI chat about a PR."""

    pr_number: int | str


class OpenInEditorRequest(BaseModel):
    """Request body for opening a repository file in the local editor."""

    file_path: str = Field(..., min_length=1)
    line: int | str | None = None


# --- Response Models ---


class OkResponse(BaseModel):
    ok: bool = True
    message: str | None = None


class GitHubHealth(BaseModel):
    authenticated: bool


class OpencodeStatusResponse(BaseModel):
    installed: bool
    version: str | None = None
    server_running: bool = False
    server_url: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    version: str
    github: GitHubHealth
    opencode: OpencodeStatusResponse
    repo: RepoInfo | None = None


class AuthStatusResponse(BaseModel):
    authenticated: bool
    user: GitHubUser | None = None
    error: str | None = None


class DiffResponse(BaseModel):
    diff: str


class DiffFileResponse(BaseModel):
    """One file section of a PR diff."""

    path: str
    change_type: ChangeType
    hunk_count: int
    old_path: str | None = None

    @classmethod
    def from_fragment(cls, fragment: FileDiffFragment) -> DiffFileResponse:
        return cls(
            path=fragment.path,
            change_type=fragment.change_type,
            hunk_count=fragment.hunk_count,
            old_path=fragment.old_path,
        )


class AnnotationResponse(BaseModel):
    start_line: int
    end_line: int
    category: str
    class_name: str
    glyph_margin_class_name: str | None = None


class RenderResponse(BaseModel):
    """Display buffer for one file plus its line annotations.

    ``decorations`` carries the same annotations in the editor widget's
    native shape so the UI can apply them directly.
    """

    path: str
    content: str
    line_count: int
    annotations: list[AnnotationResponse]
    decorations: list[dict[str, Any]]

    @classmethod
    def from_rendered(cls, path: str, rendered: RenderedDiff) -> RenderResponse:
        return cls(
            path=path,
            content=rendered.content,
            line_count=len(rendered.lines),
            annotations=[
                AnnotationResponse(
                    start_line=annotation.start_line,
                    end_line=annotation.end_line,
                    category=annotation.category.value,
                    class_name=annotation.class_name,
                    glyph_margin_class_name=annotation.glyph_margin_class_name,
                )
                for annotation in rendered.annotations
            ],
            decorations=rendered.to_editor_decorations(),
        )


class SidesResponse(BaseModel):
    path: str
    original: str
    modified: str

    @classmethod
    def from_sides(cls, path: str, sides: DiffSides) -> SidesResponse:
        return cls(path=path, original=sides.original, modified=sides.modified)


class ChatResponse(BaseModel):
    ok: bool = True
    message: str
    server_url: str
    session_id: str | None = None
