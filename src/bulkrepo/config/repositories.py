"""Repository list resolution.

Repositories come from a comma-separated list, a YAML file with a
``repos`` array (strings or ``{repo, ...overrides}`` mappings), or
``all`` repositories of an owner.
"""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, Field

from bulkrepo.errors import ConfigurationError, GitHubAPIError
from bulkrepo.ports.github import OwnerPort


class RepositoryEntry(BaseModel):
    """One repository to reconcile plus its overrides."""

    repo: str
    overrides: dict[str, Any] = Field(default_factory=dict)


def _entry_from_yaml(item: Any) -> RepositoryEntry:
    if isinstance(item, str):
        return RepositoryEntry(repo=item)
    if isinstance(item, dict) and isinstance(item.get("repo"), str):
        overrides = {k: v for k, v in item.items() if k != "repo"}
        return RepositoryEntry(repo=item["repo"], overrides=overrides)
    raise ConfigurationError(f"Invalid repository entry in repositories file: {item!r}")


def load_repositories_file(path: Path) -> list[RepositoryEntry]:
    """Parse a YAML repositories file."""
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse repositories file: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("repos"), list):
        raise ConfigurationError(
            'Failed to parse repositories file: YAML file must contain a "repos" array'
        )
    return [_entry_from_yaml(item) for item in data["repos"]]


async def list_owner_repositories(owner: str, client: OwnerPort) -> list[RepositoryEntry]:
    """List every repository of an organization, or of a user if not an org."""
    logger.info("Fetching all repositories for {}...", owner)
    try:
        if await client.org_exists(owner):
            repos = await client.list_org_repos(owner)
        else:
            repos = await client.list_user_repos(owner)
    except GitHubAPIError as e:
        raise ConfigurationError(f"Failed to fetch repositories for {owner}: {e}") from e

    entries = [RepositoryEntry(repo=r["full_name"]) for r in repos]
    logger.info("Found {} repositories", len(entries))
    return entries


async def resolve_repositories(
    repositories: str | None,
    repositories_file: Path | None,
    owner: str | None,
    client: OwnerPort,
) -> list[RepositoryEntry]:
    """
    Resolve the list of repositories to reconcile.

    A repositories file takes precedence, then ``all`` with an owner,
    then a comma-separated list.

    Raises:
        ConfigurationError: If nothing is specified or the input is invalid.
    """
    entries: list[RepositoryEntry] = []

    if repositories_file:
        entries = load_repositories_file(repositories_file)
    elif repositories and repositories.strip() == "all":
        if not owner:
            raise ConfigurationError('Owner must be specified when using "all" for repositories')
        entries = await list_owner_repositories(owner, client)
    elif repositories:
        entries = [
            RepositoryEntry(repo=name.strip())
            for name in repositories.split(",")
            if name.strip()
        ]

    if not entries:
        raise ConfigurationError(
            'No repositories specified. Use repositories, repositories-file, or repositories="all" with owner'
        )
    return entries
