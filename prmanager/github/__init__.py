"""GitHub data source: credentials, repository discovery and the REST client."""

from prmanager.github.client import GitHubClient, github_client
from prmanager.github.errors import GitHubAuthError, GitHubServiceError

__all__ = ["GitHubAuthError", "GitHubClient", "GitHubServiceError", "github_client"]
