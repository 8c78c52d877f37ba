"""Pydantic models for GitHub records and API error payloads."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class PRState(str, Enum):
    """Pull request list filter accepted by the API."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class ErrorDetail(BaseModel):
    """Structured error payload for API responses."""

    code: str
    message: str
    details: dict | list | str | None = None


class ErrorResponse(BaseModel):
    """Envelope for API error responses."""

    error: ErrorDetail


# --- GitHub records ---


class Author(BaseModel):
    login: str = "unknown"
    avatar_url: str | None = None


class Label(BaseModel):
    name: str
    color: str | None = None


class RepoInfo(BaseModel):
    """Owner/name pair of the reviewed repository."""

    owner: str
    repo: str
    name_with_owner: str


class PullRequest(BaseModel):
    """Pull request summary shown in the PR list."""

    number: int
    title: str
    state: Literal["open", "closed"]
    author: Author
    created_at: str
    updated_at: str
    head_ref_name: str
    base_ref_name: str
    labels: list[Label] = Field(default_factory=list)
    is_draft: bool = False
    url: str | None = None


class CommitAuthor(BaseModel):
    name: str = "unknown"
    email: str = ""
    date: str = ""


class Commit(BaseModel):
    sha: str
    message: str
    author: CommitAuthor | None = None


class FileChange(BaseModel):
    """A changed file as reported by the pulls/files endpoint."""

    filename: str
    status: str
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None
    previous_filename: str | None = None


class PullRequestDetail(PullRequest):
    """Full pull request with files and commits."""

    body: str = ""
    merged_at: str | None = None
    closed_at: str | None = None
    mergeable: bool | None = None
    files: list[FileChange] = Field(default_factory=list)
    commits: list[Commit] = Field(default_factory=list)
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = None


class ReviewComment(BaseModel):
    """A line-anchored review comment."""

    id: int
    author: Author
    body: str
    path: str
    line: int | None = None
    original_line: int | None = None
    position: int | None = None
    created_at: str
    updated_at: str
    in_reply_to_id: int | None = None
    diff_hunk: str | None = None
    start_line: int | None = None
    side: Literal["LEFT", "RIGHT"] | None = None


class IssueComment(BaseModel):
    """A general conversation comment on a pull request."""

    id: int
    body: str = ""
    user: Author
    created_at: str
    updated_at: str


class SearchResult(BaseModel):
    number: int
    title: str
    state: str
    url: str | None = None
    created_at: str
    updated_at: str


class GitHubUser(BaseModel):
    login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None


class RateLimit(BaseModel):
    limit: int
    remaining: int
    reset: str
    used: int
