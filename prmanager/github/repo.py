"""Helpers for locating the local Git repository and its GitHub remote."""

from __future__ import annotations

import re
import shutil
from subprocess import CalledProcessError, run

from prmanager.github.errors import GitHubServiceError
from prmanager.models import RepoInfo

# https://github.com/owner/repo(.git) and git@github.com:owner/repo(.git)
_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/(.+?)(?:\.git)?/?$")


def parse_remote_url(url: str) -> RepoInfo | None:
    """Parse an HTTPS or SSH GitHub remote URL into a ``RepoInfo``."""
    match = _REMOTE_RE.search(url.strip())
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    if not owner or not repo:
        return None
    return RepoInfo(owner=owner, repo=repo, name_with_owner=f"{owner}/{repo}")


def _git(repo_path: str, *args: str) -> str:
    git = shutil.which("git")
    if not git:
        raise FileNotFoundError("git executable not found")
    result = run([git, "-C", repo_path, *args], capture_output=True, text=True, check=True)
    return result.stdout.strip()


def get_repo_info(repo_path: str) -> RepoInfo:
    """Read ``remote.origin.url`` of ``repo_path`` and parse it.

    Raises:
        GitHubServiceError: ``INVALID_REPO`` when there is no GitHub remote.
    """
    try:
        url = _git(repo_path, "config", "--get", "remote.origin.url")
    except (CalledProcessError, OSError) as exc:
        raise GitHubServiceError(
            "Not a GitHub repository or no remote configured", "INVALID_REPO"
        ) from exc
    info = parse_remote_url(url)
    if info is None:
        raise GitHubServiceError(
            "Not a GitHub repository or no remote configured", "INVALID_REPO"
        )
    return info


def get_repo_root(repo_path: str) -> str:
    """Return the top-level directory of the work tree containing ``repo_path``."""
    try:
        return _git(repo_path, "rev-parse", "--show-toplevel")
    except (CalledProcessError, OSError) as exc:
        raise GitHubServiceError("Not inside a git repository", "INVALID_REPO") from exc
