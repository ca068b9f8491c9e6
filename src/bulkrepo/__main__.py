"""CLI entry point for bulkrepo.

Provides commands for reconciling repository settings and
listing the repositories of an owner.
"""

import asyncio
import sys
from pathlib import Path

import click

from bulkrepo import __version__


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Bulk GitHub repository settings reconciler.

    Brings merge settings, topics, security features, managed files,
    rulesets and autolinks of many repositories in line with one
    declared configuration.
    """
    pass


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--repositories",
    "-r",
    help='Comma-separated owner/repo list, or "all" together with --owner',
)
@click.option(
    "--repositories-file",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file with a repos array and optional per-repository overrides",
)
@click.option("--owner", help="Owner whose repositories are used with --repositories all")
@click.option("--dry-run", is_flag=True, help="Report changes without applying them")
@click.option(
    "--output-json",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write per-repository results as JSON",
)
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: GITHUB_TOKEN)")
def sync(
    config: Path | None,
    repositories: str | None,
    repositories_file: Path | None,
    owner: str | None,
    dry_run: bool,
    output_json: Path | None,
    token: str | None,
) -> None:
    """Reconcile repositories against the configuration.

    Exits non-zero if any repository failed or the configuration
    is invalid.
    """
    from bulkrepo.config.loader import load_config
    from bulkrepo.config.repositories import resolve_repositories
    from bulkrepo.errors import BulkRepoError, ConfigurationError
    from bulkrepo.github import GitHubClient
    from bulkrepo.services.runner import SyncRunner
    from bulkrepo.services.summary import render_summary, results_to_json
    from bulkrepo.utils.logging import configure_logging

    async def main() -> bool:
        cfg = load_config(config)
        configure_logging(cfg.logging)

        if token:
            cfg.github.token = token
        if not cfg.github.token:
            raise ConfigurationError("A GitHub token is required (--token or GITHUB_TOKEN)")

        run_dry = dry_run or cfg.dry_run
        if not cfg.desired_state().has_work():
            raise ConfigurationError("At least one repository setting must be specified")

        async with GitHubClient(cfg.github) as gh:
            entries = await resolve_repositories(repositories, repositories_file, owner, gh)
            runner = SyncRunner(gh, cfg, dry_run=run_dry)
            results = await runner.run(entries)

        click.echo(render_summary(results, dry_run=run_dry))
        if output_json:
            output_json.write_text(results_to_json(results))

        return all(r.success for r in results)

    try:
        ok = asyncio.run(main())
    except (BulkRepoError, FileNotFoundError, ValueError) as e:
        click.echo(f"Action failed with error: {e}", err=True)
        sys.exit(1)

    if not ok:
        sys.exit(1)


@cli.command("list-repos")
@click.option("--owner", required=True, help="Organization or user name")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: GITHUB_TOKEN)")
def list_repos(owner: str, config: Path | None, token: str | None) -> None:
    """List every repository of an organization or user."""
    from bulkrepo.config.loader import load_config
    from bulkrepo.config.repositories import list_owner_repositories
    from bulkrepo.errors import BulkRepoError
    from bulkrepo.github import GitHubClient
    from bulkrepo.utils.logging import configure_logging

    async def main() -> list[str]:
        cfg = load_config(config)
        configure_logging(cfg.logging)
        if token:
            cfg.github.token = token

        async with GitHubClient(cfg.github) as gh:
            entries = await list_owner_repositories(owner, gh)
        return [entry.repo for entry in entries]

    try:
        names = asyncio.run(main())
    except (BulkRepoError, FileNotFoundError, ValueError) as e:
        click.echo(f"Action failed with error: {e}", err=True)
        sys.exit(1)

    for name in names:
        click.echo(name)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
