"""Async GitHub REST client for pull request data."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from prmanager import __version__
from prmanager.github.auth import get_github_token
from prmanager.github.errors import GitHubServiceError
from prmanager.github.repo import get_repo_info
from prmanager.models import (
    Author,
    Commit,
    CommitAuthor,
    FileChange,
    GitHubUser,
    IssueComment,
    Label,
    PRState,
    PullRequest,
    PullRequestDetail,
    RateLimit,
    RepoInfo,
    ReviewComment,
    SearchResult,
)
from prmanager.settings import settings

logger = structlog.get_logger(__name__)

USER_AGENT = f"RPM-GitHub-PR-Reviewer/{__version__}"
JSON_MEDIA_TYPE = "application/vnd.github+json"
DIFF_MEDIA_TYPE = "application/vnd.github.diff"
MAX_PER_PAGE = 100


def _format_reset(value: str | None) -> str:
    try:
        reset = datetime.fromtimestamp(int(value or ""), tz=timezone.utc)
    except (TypeError, ValueError):
        return "later"
    return reset.strftime("%H:%M:%S UTC")


def map_http_error(response: httpx.Response) -> GitHubServiceError:
    """Translate a failed GitHub response into a ``GitHubServiceError``."""
    status = response.status_code
    if status == 401:
        return GitHubServiceError(
            "GitHub authentication failed. Run: gh auth login", "AUTH_FAILED", 401
        )
    if status == 403:
        if response.headers.get("x-ratelimit-remaining") == "0":
            reset = _format_reset(response.headers.get("x-ratelimit-reset"))
            return GitHubServiceError(
                f"Rate limit exceeded. Resets at {reset}", "RATE_LIMIT", 403
            )
        return GitHubServiceError(
            "Access forbidden. Check repository permissions.", "FORBIDDEN", 403
        )
    if status == 404:
        return GitHubServiceError("Pull request or repository not found", "NOT_FOUND", 404)
    if status == 422:
        return GitHubServiceError("Invalid request parameters", "INVALID_REQUEST", 422)
    try:
        detail = response.json().get("message") or response.reason_phrase
    except (ValueError, AttributeError):
        detail = response.reason_phrase
    return GitHubServiceError(f"GitHub API error: {detail}", "API_ERROR", status)


def _author(user: dict[str, Any] | None) -> Author:
    user = user or {}
    return Author(login=user.get("login") or "unknown", avatar_url=user.get("avatar_url"))


def _labels(labels: list[Any]) -> list[Label]:
    result: list[Label] = []
    for label in labels or []:
        if isinstance(label, str):
            result.append(Label(name=label))
        else:
            result.append(Label(name=label.get("name") or "", color=label.get("color")))
    return result


def _pull_request_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "number": data["number"],
        "title": data.get("title", ""),
        "state": data.get("state", "open"),
        "author": _author(data.get("user")),
        "created_at": data.get("created_at", ""),
        "updated_at": data.get("updated_at", ""),
        "head_ref_name": (data.get("head") or {}).get("ref", ""),
        "base_ref_name": (data.get("base") or {}).get("ref", ""),
        "labels": _labels(data.get("labels", [])),
        "is_draft": bool(data.get("draft")),
        "url": data.get("html_url"),
    }


def _file_change(data: dict[str, Any]) -> FileChange:
    return FileChange(
        filename=data["filename"],
        status=data.get("status", "modified"),
        additions=data.get("additions", 0),
        deletions=data.get("deletions", 0),
        changes=data.get("changes", 0),
        patch=data.get("patch"),
        previous_filename=data.get("previous_filename"),
    )


def _commit(data: dict[str, Any]) -> Commit:
    commit = data.get("commit") or {}
    author = commit.get("author") or {}
    return Commit(
        sha=data["sha"],
        message=commit.get("message", ""),
        author=CommitAuthor(
            name=author.get("name") or "unknown",
            email=author.get("email") or "",
            date=author.get("date") or "",
        ),
    )


def _review_comment(data: dict[str, Any]) -> ReviewComment:
    return ReviewComment(
        id=data["id"],
        author=_author(data.get("user")),
        body=data.get("body", ""),
        path=data.get("path", ""),
        line=data.get("line"),
        original_line=data.get("original_line"),
        position=data.get("position"),
        created_at=data.get("created_at", ""),
        updated_at=data.get("updated_at", ""),
        in_reply_to_id=data.get("in_reply_to_id"),
        diff_hunk=data.get("diff_hunk"),
        start_line=data.get("start_line"),
        side=data.get("side"),
    )


class GitHubClient:
    """Pull request queries against the repository checked out at ``repo_path``."""

    def __init__(
        self,
        *,
        token: str | None = None,
        repo: RepoInfo | None = None,
        repo_path: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._repo = repo
        self._repo_path = repo_path
        self._base_url = base_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            token = self._token or await asyncio.to_thread(get_github_token)
            self._client = httpx.AsyncClient(
                base_url=self._base_url or settings.github_api_url(),
                headers={
                    "Accept": JSON_MEDIA_TYPE,
                    "Authorization": f"Bearer {token}",
                    "User-Agent": USER_AGENT,
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=settings.github_timeout_seconds(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def repo_info(self) -> RepoInfo:
        """Return (and remember) the owner/name of the reviewed repository."""
        if self._repo is None:
            repo_path = self._repo_path or settings.repo_path()
            self._repo = await asyncio.to_thread(get_repo_info, repo_path)
        return self._repo

    async def _request(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        client = await self._http()
        headers = {"Accept": accept} if accept else None
        try:
            response = await client.get(path, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = map_http_error(exc.response)
            logger.warning(
                "GitHub request failed",
                path=path,
                status_code=exc.response.status_code,
                code=error.code,
            )
            raise error from exc
        except httpx.TransportError as exc:
            logger.warning("GitHub request failed", path=path, error=str(exc))
            raise GitHubServiceError(
                "Network error. Check your internet connection.", "NETWORK_ERROR"
            ) from exc
        return response

    async def _repo_path_prefix(self) -> str:
        repo = await self.repo_info()
        return f"/repos/{repo.owner}/{repo.repo}"

    async def list_prs(self, state: PRState | str = PRState.OPEN, limit: int = 100) -> list[PullRequest]:
        prefix = await self._repo_path_prefix()
        response = await self._request(
            f"{prefix}/pulls",
            params={
                "state": str(PRState(state).value),
                "per_page": min(limit, MAX_PER_PAGE),
                "sort": "updated",
                "direction": "desc",
            },
        )
        return [PullRequest(**_pull_request_fields(item)) for item in response.json()]

    async def get_pr_detail(self, number: int) -> PullRequestDetail:
        """Fetch a pull request with its files and commits in parallel."""
        prefix = await self._repo_path_prefix()
        pr_response, files_response, commits_response = await asyncio.gather(
            self._request(f"{prefix}/pulls/{number}"),
            self._request(f"{prefix}/pulls/{number}/files", params={"per_page": MAX_PER_PAGE}),
            self._request(f"{prefix}/pulls/{number}/commits", params={"per_page": MAX_PER_PAGE}),
        )
        data = pr_response.json()
        return PullRequestDetail(
            **_pull_request_fields(data),
            body=data.get("body") or "",
            merged_at=data.get("merged_at"),
            closed_at=data.get("closed_at"),
            mergeable=data.get("mergeable"),
            files=[_file_change(item) for item in files_response.json()],
            commits=[_commit(item) for item in commits_response.json()],
            additions=data.get("additions"),
            deletions=data.get("deletions"),
            changed_files=data.get("changed_files"),
        )

    async def get_pr_diff(self, number: int) -> str:
        prefix = await self._repo_path_prefix()
        response = await self._request(f"{prefix}/pulls/{number}", accept=DIFF_MEDIA_TYPE)
        return response.text

    async def get_pr_comments(self, number: int) -> list[ReviewComment]:
        prefix = await self._repo_path_prefix()
        response = await self._request(
            f"{prefix}/pulls/{number}/comments", params={"per_page": MAX_PER_PAGE}
        )
        return [_review_comment(item) for item in response.json()]

    async def get_pr_conversation(self, number: int) -> list[IssueComment]:
        prefix = await self._repo_path_prefix()
        response = await self._request(
            f"{prefix}/issues/{number}/comments", params={"per_page": MAX_PER_PAGE}
        )
        return [
            IssueComment(
                id=item["id"],
                body=item.get("body") or "",
                user=_author(item.get("user")),
                created_at=item.get("created_at", ""),
                updated_at=item.get("updated_at", ""),
            )
            for item in response.json()
        ]

    async def search_prs(self, query: str) -> list[SearchResult]:
        repo = await self.repo_info()
        response = await self._request(
            "/search/issues",
            params={"q": f"repo:{repo.name_with_owner} is:pr {query}", "per_page": 50},
        )
        return [
            SearchResult(
                number=item["number"],
                title=item.get("title", ""),
                state=item.get("state", ""),
                url=item.get("html_url"),
                created_at=item.get("created_at", ""),
                updated_at=item.get("updated_at", ""),
            )
            for item in response.json().get("items", [])
        ]

    async def get_current_user(self) -> GitHubUser:
        data = (await self._request("/user")).json()
        return GitHubUser(
            login=data["login"],
            name=data.get("name"),
            email=data.get("email"),
            avatar_url=data.get("avatar_url"),
        )

    async def get_rate_limit(self) -> RateLimit:
        rate = (await self._request("/rate_limit")).json()["rate"]
        reset = datetime.fromtimestamp(rate["reset"], tz=timezone.utc)
        return RateLimit(
            limit=rate["limit"],
            remaining=rate["remaining"],
            reset=reset.isoformat(),
            used=rate.get("used", rate["limit"] - rate["remaining"]),
        )

    async def is_authenticated(self) -> bool:
        try:
            await self.get_current_user()
        except GitHubServiceError:
            return False
        return True


github_client = GitHubClient()
