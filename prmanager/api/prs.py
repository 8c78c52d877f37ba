"""Pull request endpoints: listings, details, comments and per-file diffs."""

from __future__ import annotations

import hashlib

import structlog
from fastapi import APIRouter, Depends, Query

from prmanager.api.deps import get_cache, get_github_client
from prmanager.api.errors import raise_http_error, service_errors
from prmanager.api.schemas import (
    DiffFileResponse,
    DiffResponse,
    RenderResponse,
    SidesResponse,
)
from prmanager.cache import TTLCache
from prmanager.diff import extract, list_files, render, split_sides
from prmanager.github.client import GitHubClient
from prmanager.models import (
    IssueComment,
    PullRequest,
    PullRequestDetail,
    ReviewComment,
    SearchResult,
)
from prmanager.validation import validate_file_path, validate_pr_number, validate_state

router = APIRouter(tags=["prs"])
logger = structlog.get_logger(__name__)


def diff_digest(diff: str) -> str:
    """Short content hash so cached renders follow a refreshed diff."""
    return hashlib.sha1(diff.encode("utf-8")).hexdigest()[:12]


async def _pr_diff(number: int, client: GitHubClient, cache: TTLCache) -> str:
    key = f"pr:{number}:diff"
    diff = cache.get(key)
    if diff is None:
        diff = await client.get_pr_diff(number)
        cache.set(key, diff)
    return diff


@router.get("/prs", response_model=list[PullRequest])
async def list_prs(
    state: str | None = Query(None),
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> list[PullRequest]:
    """List pull requests of the repository, most recently updated first."""
    pr_state = validate_state(state)
    key = f"prs:{pr_state.value}"
    cached = cache.get(key)
    if cached is not None:
        return cached
    with service_errors():
        prs = await client.list_prs(pr_state)
    cache.set(key, prs)
    logger.info("Listed pull requests", state=pr_state.value, count=len(prs))
    return prs


@router.get("/prs/search", response_model=list[SearchResult])
async def search_prs(
    q: str = Query(..., min_length=1, max_length=256),
    client: GitHubClient = Depends(get_github_client),
) -> list[SearchResult]:
    """Full-text search over the repository's pull requests."""
    with service_errors():
        results = await client.search_prs(q)
    logger.info("Searched pull requests", count=len(results))
    return results


@router.get("/prs/{number}", response_model=PullRequestDetail)
async def get_pr(
    number: str,
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> PullRequestDetail:
    with service_errors():
        pr_number = validate_pr_number(number)
        key = f"pr:{pr_number}"
        detail = cache.get(key)
        if detail is None:
            detail = await client.get_pr_detail(pr_number)
            cache.set(key, detail)
    return detail


@router.get("/prs/{number}/diff", response_model=DiffResponse)
async def get_pr_diff(
    number: str,
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> DiffResponse:
    """Return the raw unified diff of the whole PR."""
    with service_errors():
        pr_number = validate_pr_number(number)
        diff = await _pr_diff(pr_number, client, cache)
    return DiffResponse(diff=diff)


@router.get("/prs/{number}/comments", response_model=list[ReviewComment])
async def get_pr_comments(
    number: str,
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> list[ReviewComment]:
    with service_errors():
        pr_number = validate_pr_number(number)
        key = f"pr:{pr_number}:comments"
        comments = cache.get(key)
        if comments is None:
            comments = await client.get_pr_comments(pr_number)
            cache.set(key, comments)
    return comments


@router.get("/prs/{number}/conversation", response_model=list[IssueComment])
async def get_pr_conversation(
    number: str,
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> list[IssueComment]:
    with service_errors():
        pr_number = validate_pr_number(number)
        key = f"pr:{pr_number}:conversation"
        conversation = cache.get(key)
        if conversation is None:
            conversation = await client.get_pr_conversation(pr_number)
            cache.set(key, conversation)
    return conversation


@router.get("/prs/{number}/files", response_model=list[DiffFileResponse])
async def get_pr_files(
    number: str,
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> list[DiffFileResponse]:
    """List the files touched by the PR diff with their change types."""
    with service_errors():
        pr_number = validate_pr_number(number)
        diff = await _pr_diff(pr_number, client, cache)
    files: list[DiffFileResponse] = []
    for path in list_files(diff):
        fragment = extract(diff, path)
        if fragment is not None:
            files.append(DiffFileResponse.from_fragment(fragment))
    return files


@router.get("/prs/{number}/render", response_model=RenderResponse)
async def render_file(
    number: str,
    path: str = Query(...),
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> RenderResponse:
    """Render one file's diff as editor content plus decorations."""
    with service_errors():
        pr_number = validate_pr_number(number)
        file_path = validate_file_path(path)
        diff = await _pr_diff(pr_number, client, cache)

    key = f"pr:{pr_number}:render:{diff_digest(diff)}:{file_path}"
    response = cache.get(key)
    if response is None:
        rendered = render(diff, file_path)
        if rendered is None:
            raise_http_error("FILE_NOT_IN_DIFF", f"{file_path} is not part of this diff", 404)
        response = RenderResponse.from_rendered(file_path, rendered)
        cache.set(key, response)
        logger.info(
            "Rendered file diff",
            pr_number=pr_number,
            file_path=file_path,
            line_count=response.line_count,
            annotation_count=len(response.annotations),
        )
    return response


@router.get("/prs/{number}/sides", response_model=SidesResponse)
async def file_sides(
    number: str,
    path: str = Query(...),
    client: GitHubClient = Depends(get_github_client),
    cache: TTLCache = Depends(get_cache),
) -> SidesResponse:
    """Return the original and modified hunk text of one file."""
    with service_errors():
        pr_number = validate_pr_number(number)
        file_path = validate_file_path(path)
        diff = await _pr_diff(pr_number, client, cache)

    sides = split_sides(diff, file_path)
    if sides is None:
        raise_http_error(
            "NO_SIDES", f"{file_path} has no text diff in this PR", 404
        )
    return SidesResponse.from_sides(file_path, sides)
