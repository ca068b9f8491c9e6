"""Sync driver.

Processes repositories one at a time. For each repository the settings
reconciler runs first, then every configured file, ruleset and autolink
reconciler. Each reconciler captures its own failures, so one failing
resource leaves the others' results intact.
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from bulkrepo.config.loader import load_autolinks, load_ruleset
from bulkrepo.config.models import Config, DesiredState, FileSyncConfig
from bulkrepo.config.overrides import KnownKeys, apply_overrides
from bulkrepo.config.repositories import RepositoryEntry
from bulkrepo.models.repository import AutolinkSpec, RulesetSpec
from bulkrepo.models.results import FileSyncResult, RepositoryResult
from bulkrepo.ports.github import GitHubPort
from bulkrepo.services.autolinks import AutolinkReconciler
from bulkrepo.services.content import ContentProcessor, GitignoreProcessor
from bulkrepo.services.file_sync import FileSyncEngine
from bulkrepo.services.package_json import PackageJsonReconciler
from bulkrepo.services.rulesets import RulesetReconciler
from bulkrepo.services.settings import SettingsReconciler


@dataclass
class RepositoryPlan:
    """Validated desired state for one repository."""

    repository: str
    desired: DesiredState
    ruleset: RulesetSpec | None = None
    autolinks: list[AutolinkSpec] | None = None


class SyncRunner:
    """Reconciles a list of repositories sequentially."""

    def __init__(
        self,
        client: GitHubPort,
        config: Config,
        known_keys: KnownKeys | None = None,
        dry_run: bool | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.known_keys = known_keys or KnownKeys()
        self.dry_run = config.dry_run if dry_run is None else dry_run

        self.settings = SettingsReconciler(client)
        self.file_sync = FileSyncEngine(client)
        self.package_json = PackageJsonReconciler(client)
        self.rulesets = RulesetReconciler(client)
        self.autolinks = AutolinkReconciler(client)

    def plan(self, entries: list[RepositoryEntry]) -> list[RepositoryPlan]:
        """
        Apply overrides and load ruleset/autolink documents for every repository.

        Raises:
            ConfigurationError: Before any repository is touched.
        """
        base = self.config.desired_state()
        rulesets: dict[Path, RulesetSpec] = {}
        autolinks: dict[Path | None, list[AutolinkSpec]] = {}
        plans = []

        for entry in entries:
            desired = apply_overrides(base, entry.overrides, self.known_keys)
            plan = RepositoryPlan(repository=entry.repo, desired=desired)

            if desired.ruleset.file is not None:
                path = desired.ruleset.file
                if path not in rulesets:
                    rulesets[path] = load_ruleset(path)
                plan.ruleset = rulesets[path]

            if desired.autolinks.enabled:
                if desired.autolinks.links is not None:
                    plan.autolinks = list(desired.autolinks.links)
                else:
                    key = desired.autolinks.file
                    if key not in autolinks:
                        autolinks[key] = load_autolinks(desired.autolinks)
                    plan.autolinks = autolinks[key]

            plans.append(plan)
        return plans

    async def run(self, entries: list[RepositoryEntry]) -> list[RepositoryResult]:
        plans = self.plan(entries)
        logger.info("Processing {} repositories{}", len(plans), " (dry run)" if self.dry_run else "")

        results = []
        for plan in plans:
            logger.info("Updating {}...", plan.repository)
            result = await self.reconcile_repository(plan)
            if result.success:
                logger.info("Processed {}", plan.repository)
            else:
                logger.warning("Failed to update {}: {}", plan.repository, "; ".join(result.errors))
            results.append(result)
        return results

    async def reconcile_repository(self, plan: RepositoryPlan) -> RepositoryResult:
        desired = plan.desired
        repo = plan.repository
        dry_run = self.dry_run
        result = RepositoryResult(repository=repo, dry_run=dry_run)

        if (
            desired.settings.touched()
            or desired.topics is not None
            or desired.security.requested()
        ):
            result.settings = await self.settings.reconcile(
                repo, desired.settings, desired.security, desired.topics, dry_run
            )

        file_syncs: list[tuple[str, FileSyncConfig, ContentProcessor | None]] = [
            ("dependabot", desired.dependabot, None),
            ("gitignore", desired.gitignore, GitignoreProcessor()),
            ("workflows", desired.workflows, None),
            ("pull_request_template", desired.pull_request_template, None),
        ]
        for key, sync_config, processor in file_syncs:
            if sync_config.enabled:
                result.files[key] = await self._guard(
                    key, self._sync_files(repo, sync_config, processor)
                )

        if desired.package_json.enabled:
            result.files["package_json"] = await self._guard(
                "package_json", self.package_json.reconcile(repo, desired.package_json, dry_run)
            )

        if plan.ruleset is not None:
            result.ruleset = await self.rulesets.reconcile(
                repo, plan.ruleset, desired.ruleset.delete_unmanaged, dry_run
            )

        if plan.autolinks is not None:
            result.autolinks = await self.autolinks.reconcile(repo, plan.autolinks, dry_run)

        return result

    def _sync_files(
        self, repo: str, sync_config: FileSyncConfig, processor: ContentProcessor | None
    ) -> Awaitable[FileSyncResult]:
        return self.file_sync.sync(
            repo,
            sync_config.targets(),
            branch=sync_config.branch,
            pr_title=sync_config.pr_title,
            pr_body=sync_config.pr_body,
            processor=processor,
            dry_run=self.dry_run,
            commit_message=sync_config.commit_message,
        )

    async def _guard(self, key: str, call: Awaitable[FileSyncResult]) -> FileSyncResult:
        """Turn an unexpected exception into a failed result for that resource only."""
        try:
            return await call
        except Exception as e:
            logger.exception("Unexpected error in {} sync", key)
            return FileSyncResult(success=False, error=str(e), dry_run=self.dry_run)
