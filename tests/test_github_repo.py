"""Tests for repository discovery and token lookup."""

import subprocess
from subprocess import CalledProcessError

import pytest

from prmanager.github import auth, repo
from prmanager.github.errors import GitHubAuthError, GitHubServiceError
from prmanager.models import RepoInfo


class TestParseRemoteUrl:
    """Test GitHub remote URL parsing."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/widgets.git",
            "https://github.com/acme/widgets",
            "git@github.com:acme/widgets.git",
            "ssh://git@github.com/acme/widgets.git",
            "https://github.com/acme/widgets/\n",
        ],
    )
    def test_supported_forms(self, url: str) -> None:
        assert repo.parse_remote_url(url) == RepoInfo(
            owner="acme", repo="widgets", name_with_owner="acme/widgets"
        )

    def test_repo_name_with_dots(self) -> None:
        info = repo.parse_remote_url("git@github.com:acme/widgets.js.git")
        assert info.repo == "widgets.js"

    @pytest.mark.parametrize("url", ["", "https://gitlab.com/acme/widgets.git", "not a url"])
    def test_unsupported(self, url: str) -> None:
        assert repo.parse_remote_url(url) is None


class TestGetRepoInfo:
    """Test reading the origin remote."""

    def test_reads_origin(self, monkeypatch) -> None:
        calls = []

        def fake_git(repo_path, *args):
            calls.append((repo_path, args))
            return "git@github.com:acme/widgets.git"

        monkeypatch.setattr(repo, "_git", fake_git)

        assert repo.get_repo_info("/work").name_with_owner == "acme/widgets"
        assert calls == [("/work", ("config", "--get", "remote.origin.url"))]

    def test_missing_remote(self, monkeypatch) -> None:
        def fake_git(repo_path, *args):
            raise CalledProcessError(1, ["git"])

        monkeypatch.setattr(repo, "_git", fake_git)

        with pytest.raises(GitHubServiceError) as exc_info:
            repo.get_repo_info("/work")
        assert exc_info.value.code == "INVALID_REPO"

    def test_non_github_remote(self, monkeypatch) -> None:
        monkeypatch.setattr(repo, "_git", lambda repo_path, *args: "https://gitlab.com/a/b.git")

        with pytest.raises(GitHubServiceError):
            repo.get_repo_info("/work")

    def test_repo_root(self, monkeypatch) -> None:
        monkeypatch.setattr(repo, "_git", lambda repo_path, *args: "/work/top")
        assert repo.get_repo_root("/work/top/sub") == "/work/top"

    def test_repo_root_outside_git(self, monkeypatch) -> None:
        def fake_git(repo_path, *args):
            raise FileNotFoundError("git executable not found")

        monkeypatch.setattr(repo, "_git", fake_git)

        with pytest.raises(GitHubServiceError):
            repo.get_repo_root("/tmp")


class TestGetGitHubToken:
    """Test credential discovery order."""

    def _fake_run(self, returncode: int = 0, stdout: str = ""):
        def run(*args, **kwargs):
            return subprocess.CompletedProcess(args[0], returncode, stdout=stdout, stderr="")

        return run

    def test_prefers_gh_cli(self, monkeypatch) -> None:
        monkeypatch.setattr(auth.subprocess, "run", self._fake_run(stdout="gho_" + "x" * 36 + "\n"))
        monkeypatch.setenv("GITHUB_TOKEN", "env-token-value-0123456789")

        assert auth.get_github_token() == "gho_" + "x" * 36

    def test_falls_back_to_env(self, monkeypatch) -> None:
        monkeypatch.setattr(auth.subprocess, "run", self._fake_run(returncode=1))
        monkeypatch.setenv("GITHUB_TOKEN", "env-token-value-0123456789")

        assert auth.get_github_token() == "env-token-value-0123456789"

    def test_short_cli_output_is_ignored(self, monkeypatch) -> None:
        monkeypatch.setattr(auth.subprocess, "run", self._fake_run(stdout="not logged in"))
        monkeypatch.setenv("GITHUB_TOKEN", "env-token-value-0123456789")

        assert auth.get_github_token() == "env-token-value-0123456789"

    def test_missing_gh_binary(self, monkeypatch) -> None:
        def missing(*args, **kwargs):
            raise FileNotFoundError("gh")

        monkeypatch.setattr(auth.subprocess, "run", missing)
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        with pytest.raises(GitHubAuthError) as exc_info:
            auth.get_github_token()
        assert exc_info.value.status_code == 401
        assert "gh auth login" in exc_info.value.message
