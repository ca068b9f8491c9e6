"""GitHub API adapter."""

from bulkrepo.github.client import GitHubClient

__all__ = ["GitHubClient"]
