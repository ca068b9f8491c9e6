"""Tests for CLI entry point."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from bulkrepo.__main__ import cli
from bulkrepo.models.results import RepositoryResult, SettingsResult


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "bulkrepo.yaml"
    path.write_text("settings:\n  allow_squash_merge: true\n")
    return path


@pytest.fixture
def mock_client_class() -> MagicMock:
    """Patch GitHubClient so it works as an async context manager."""
    gh = AsyncMock()
    client_class = MagicMock()
    client_class.return_value.__aenter__ = AsyncMock(return_value=gh)
    client_class.return_value.__aexit__ = AsyncMock(return_value=None)
    return client_class


def test_cli_help(runner: CliRunner) -> None:
    """Test CLI help command."""
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Bulk GitHub repository settings reconciler" in result.output
    assert "sync" in result.output
    assert "list-repos" in result.output


def test_cli_version(runner: CliRunner) -> None:
    """Test CLI version command."""
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()


def test_sync_command_help(runner: CliRunner) -> None:
    """Test sync command help text."""
    result = runner.invoke(cli, ["sync", "--help"])
    assert result.exit_code == 0
    assert "--repositories-file" in result.output
    assert "--dry-run" in result.output
    assert "--output-json" in result.output


@patch("bulkrepo.utils.logging.configure_logging")
def test_sync_requires_token(
    mock_logging: MagicMock, runner: CliRunner, config_file: Path
) -> None:
    """Missing token is a configuration error."""
    result = runner.invoke(
        cli, ["sync", "-c", str(config_file), "-r", "acme/api"], env={"GITHUB_TOKEN": ""}
    )

    assert result.exit_code == 1
    assert "Action failed with error" in result.output
    assert "token" in result.output


@patch("bulkrepo.utils.logging.configure_logging")
def test_sync_requires_some_setting(
    mock_logging: MagicMock, runner: CliRunner, tmp_path: Path
) -> None:
    """A config with nothing to do is rejected."""
    empty = tmp_path / "empty.yaml"
    empty.write_text("dry_run: false\n")

    result = runner.invoke(cli, ["sync", "-c", str(empty), "-r", "acme/api", "--token", "t"])

    assert result.exit_code == 1
    assert "At least one repository setting must be specified" in result.output


@patch("bulkrepo.utils.logging.configure_logging")
def test_sync_requires_owner_for_all(
    mock_logging: MagicMock,
    runner: CliRunner,
    config_file: Path,
    mock_client_class: MagicMock,
) -> None:
    """Using all without an owner fails with a configuration error."""
    with patch("bulkrepo.github.GitHubClient", mock_client_class):
        result = runner.invoke(
            cli, ["sync", "-c", str(config_file), "-r", "all", "--token", "t"]
        )

    assert result.exit_code == 1
    assert 'Owner must be specified when using "all" for repositories' in result.output


@patch("bulkrepo.utils.logging.configure_logging")
@patch("bulkrepo.services.runner.SyncRunner")
def test_sync_prints_summary_and_writes_json(
    mock_runner_class: MagicMock,
    mock_logging: MagicMock,
    runner: CliRunner,
    config_file: Path,
    mock_client_class: MagicMock,
    tmp_path: Path,
) -> None:
    """Successful run prints the summary and writes JSON results."""
    results = [
        RepositoryResult(repository="acme/api", settings=SettingsResult(repository="acme/api"))
    ]
    mock_runner_class.return_value.run = AsyncMock(return_value=results)
    output = tmp_path / "results.json"

    with patch("bulkrepo.github.GitHubClient", mock_client_class):
        result = runner.invoke(
            cli,
            [
                "sync",
                "-c",
                str(config_file),
                "-r",
                "acme/api",
                "--token",
                "t",
                "--dry-run",
                "--output-json",
                str(output),
            ],
        )

    assert result.exit_code == 0, result.output
    assert "Bulk Repository Settings Update Results" in result.output
    assert mock_runner_class.call_args.kwargs["dry_run"] is True
    entries = mock_runner_class.return_value.run.await_args.args[0]
    assert [e.repo for e in entries] == ["acme/api"]
    assert json.loads(output.read_text())[0]["repository"] == "acme/api"


@patch("bulkrepo.utils.logging.configure_logging")
@patch("bulkrepo.services.runner.SyncRunner")
def test_sync_exits_non_zero_on_failed_repository(
    mock_runner_class: MagicMock,
    mock_logging: MagicMock,
    runner: CliRunner,
    config_file: Path,
    mock_client_class: MagicMock,
) -> None:
    """Any failed repository makes the command fail."""
    results = [
        RepositoryResult(
            repository="acme/api",
            settings=SettingsResult(repository="acme/api", success=False, error="Forbidden"),
        )
    ]
    mock_runner_class.return_value.run = AsyncMock(return_value=results)

    with patch("bulkrepo.github.GitHubClient", mock_client_class):
        result = runner.invoke(
            cli, ["sync", "-c", str(config_file), "-r", "acme/api", "--token", "t"]
        )

    assert result.exit_code == 1
    assert "| acme/api | Failed |" in result.output


@patch("bulkrepo.utils.logging.configure_logging")
def test_list_repos(
    mock_logging: MagicMock, runner: CliRunner, mock_client_class: MagicMock
) -> None:
    """list-repos prints one repository per line."""
    gh = mock_client_class.return_value.__aenter__.return_value
    gh.org_exists = AsyncMock(return_value=True)
    gh.list_org_repos = AsyncMock(return_value=[{"full_name": "acme/api"}, {"full_name": "acme/web"}])

    with patch("bulkrepo.github.GitHubClient", mock_client_class):
        result = runner.invoke(cli, ["list-repos", "--owner", "acme", "--token", "t"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "acme/api" in lines
    assert "acme/web" in lines
