"""Tests for repository list resolution."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from bulkrepo.config.repositories import (
    load_repositories_file,
    resolve_repositories,
)
from bulkrepo.errors import ConfigurationError, GitHubAPIError


@pytest.fixture
def mock_owner_client() -> AsyncMock:
    """Create mock owner listing client."""
    client = AsyncMock()
    client.org_exists = AsyncMock(return_value=True)
    client.list_org_repos = AsyncMock(
        return_value=[{"full_name": "acme/api"}, {"full_name": "acme/web"}]
    )
    client.list_user_repos = AsyncMock(return_value=[{"full_name": "alice/dotfiles"}])
    return client


class TestLoadRepositoriesFile:
    """Test YAML repositories files."""

    def test_strings_and_mappings(self, tmp_path: Path) -> None:
        path = tmp_path / "repos.yml"
        path.write_text(
            "repos:\n"
            "  - acme/api\n"
            "  - repo: acme/web\n"
            "    allow-merge-commit: true\n"
            "    topics: [frontend]\n"
        )

        entries = load_repositories_file(path)

        assert [e.repo for e in entries] == ["acme/api", "acme/web"]
        assert entries[0].overrides == {}
        assert entries[1].overrides == {"allow-merge-commit": True, "topics": ["frontend"]}

    def test_missing_repos_array(self, tmp_path: Path) -> None:
        path = tmp_path / "repos.yml"
        path.write_text("repositories:\n  - acme/api\n")

        with pytest.raises(ConfigurationError, match='must contain a "repos" array'):
            load_repositories_file(path)

    def test_invalid_entry(self, tmp_path: Path) -> None:
        path = tmp_path / "repos.yml"
        path.write_text("repos:\n  - {name: acme/api}\n")

        with pytest.raises(ConfigurationError, match="Invalid repository entry"):
            load_repositories_file(path)


class TestResolveRepositories:
    """Test resolve_repositories precedence and errors."""

    @pytest.mark.asyncio
    async def test_comma_separated(self, mock_owner_client: AsyncMock) -> None:
        entries = await resolve_repositories(
            "acme/api, acme/web ,", None, None, mock_owner_client
        )
        assert [e.repo for e in entries] == ["acme/api", "acme/web"]

    @pytest.mark.asyncio
    async def test_all_for_org(self, mock_owner_client: AsyncMock) -> None:
        entries = await resolve_repositories("all", None, "acme", mock_owner_client)

        assert [e.repo for e in entries] == ["acme/api", "acme/web"]
        mock_owner_client.list_org_repos.assert_awaited_once_with("acme")
        mock_owner_client.list_user_repos.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_for_user(self, mock_owner_client: AsyncMock) -> None:
        mock_owner_client.org_exists.return_value = False

        entries = await resolve_repositories("all", None, "alice", mock_owner_client)

        assert [e.repo for e in entries] == ["alice/dotfiles"]

    @pytest.mark.asyncio
    async def test_all_requires_owner(self, mock_owner_client: AsyncMock) -> None:
        with pytest.raises(ConfigurationError, match="Owner must be specified"):
            await resolve_repositories("all", None, None, mock_owner_client)

    @pytest.mark.asyncio
    async def test_listing_failure(self, mock_owner_client: AsyncMock) -> None:
        mock_owner_client.list_org_repos.side_effect = GitHubAPIError("boom", status_code=500)

        with pytest.raises(ConfigurationError, match="Failed to fetch repositories"):
            await resolve_repositories("all", None, "acme", mock_owner_client)

    @pytest.mark.asyncio
    async def test_file_takes_precedence(
        self, tmp_path: Path, mock_owner_client: AsyncMock
    ) -> None:
        path = tmp_path / "repos.yml"
        path.write_text("repos: [acme/from-file]\n")

        entries = await resolve_repositories("acme/ignored", path, None, mock_owner_client)

        assert [e.repo for e in entries] == ["acme/from-file"]

    @pytest.mark.asyncio
    async def test_nothing_specified(self, mock_owner_client: AsyncMock) -> None:
        with pytest.raises(ConfigurationError, match="No repositories specified"):
            await resolve_repositories(None, None, None, mock_owner_client)
