"""Repository settings reconciler.

Diffs and applies merge/branch settings, topics, code scanning default
setup and security toggles for one repository.
"""

from typing import Any

from loguru import logger

from bulkrepo.config.models import SETTINGS_FIELDS, SecurityConfig, SettingsConfig
from bulkrepo.errors import GitHubAPIError, InvalidRepositoryError
from bulkrepo.models.repository import RepositoryIdentifier
from bulkrepo.models.results import (
    ChangeRecord,
    CodeScanningStatus,
    SettingsResult,
    TopicsStatus,
)
from bulkrepo.ports.github import GitHubPort
from bulkrepo.services.toggles import TOGGLES, reconcile_toggle


def diff_settings(record: dict[str, Any], desired: dict[str, bool]) -> list[ChangeRecord]:
    """ChangeRecords for touched settings whose actual value differs."""
    return [
        ChangeRecord(field=name, from_value=record.get(name), to_value=value)
        for name, value in desired.items()
        if record.get(name) != value
    ]


def diff_topics(current: list[str], desired: list[str]) -> tuple[list[str], list[str]]:
    """Return (added, removed), independent of order."""
    current_set, desired_set = set(current), set(desired)
    return sorted(desired_set - current_set), sorted(current_set - desired_set)


class SettingsReconciler:
    """
    Reconciles repository-level settings.

    Only a failed repository fetch, an access classification or an
    unexpected exception marks the result unsuccessful. Topics, code
    scanning and each security toggle fail independently as warnings.
    """

    def __init__(self, client: GitHubPort) -> None:
        self.client = client

    async def reconcile(
        self,
        repository: str,
        settings: SettingsConfig,
        security: SecurityConfig | None = None,
        topics: list[str] | None = None,
        dry_run: bool = False,
    ) -> SettingsResult:
        result = SettingsResult(repository=repository, dry_run=dry_run)
        security = security or SecurityConfig()

        try:
            repo = RepositoryIdentifier.parse(repository)
        except InvalidRepositoryError as e:
            result.success = False
            result.error = str(e)
            return result

        try:
            record = await self._fetch(repo, result)
            if record is None:
                return result

            await self._apply_settings(repo, record, settings.touched(), dry_run, result)

            if topics is not None:
                await self._reconcile_topics(repo, topics, dry_run, result)

            if security.enable_code_scanning:
                await self._reconcile_code_scanning(repo, dry_run, result)

            for toggle in TOGGLES:
                desired = getattr(security, toggle.name)
                if desired is not None:
                    await reconcile_toggle(
                        self.client, repo, record, toggle, desired, dry_run, result
                    )
        except Exception as e:
            logger.warning("Failed to update {}: {}", repository, e)
            result.success = False
            result.error = str(e)

        return result

    async def _fetch(self, repo: RepositoryIdentifier, result: SettingsResult) -> dict[str, Any] | None:
        """Fetch the repository record and classify access. None means stop."""
        try:
            record = await self.client.get_repository(repo.owner, repo.name)
        except GitHubAPIError as e:
            if e.forbidden:
                message = f"Access denied to repository {repo}. Check token permissions."
                logger.warning(message)
                result.success = False
                result.access_denied = True
                result.error = message
                return None
            raise

        if "permissions" not in record:
            message = (
                f"Insufficient permissions for repository {repo}: "
                "the token does not have any access to this repository"
            )
            logger.warning(message)
            result.success = False
            result.insufficient_permissions = True
            result.error = message
            return None

        if all(name not in record for name in SETTINGS_FIELDS):
            message = (
                f"Cannot read repository settings for {repo}. "
                "GitHub App may not be installed on this repository"
            )
            logger.warning(message)
            result.success = False
            result.insufficient_permissions = True
            result.error = message
            return None

        return record

    async def _apply_settings(
        self,
        repo: RepositoryIdentifier,
        record: dict[str, Any],
        touched: dict[str, bool],
        dry_run: bool,
        result: SettingsResult,
    ) -> None:
        result.changes = diff_settings(record, touched)
        if not result.changes:
            return

        # Every touched field is sent, not only the changed ones
        result.payload = dict(touched)
        if dry_run:
            logger.info("{}: would change {}", repo, ", ".join(map(str, result.changes)))
            return

        await self.client.update_repository(repo.owner, repo.name, **touched)
        logger.info("{}: changed {}", repo, ", ".join(map(str, result.changes)))

    async def _reconcile_topics(
        self, repo: RepositoryIdentifier, topics: list[str], dry_run: bool, result: SettingsResult
    ) -> None:
        try:
            current = await self.client.get_all_topics(repo.owner, repo.name)
            added, removed = diff_topics(current, topics)
            if not added and not removed:
                result.topics_status = TopicsStatus.UNCHANGED
                return

            result.topics_added = added
            result.topics_removed = removed
            result.topics = list(topics)
            if dry_run:
                result.topics_status = TopicsStatus.WOULD_UPDATE
                return

            await self.client.replace_all_topics(repo.owner, repo.name, list(topics))
            result.topics_status = TopicsStatus.UPDATED
            logger.info("{}: topics updated: {}", repo, ", ".join(topics))
        except Exception as e:
            message = f"Could not update topics: {e}"
            logger.warning("{}: {}", repo, message)
            result.warnings["topics"] = message

    async def _reconcile_code_scanning(
        self, repo: RepositoryIdentifier, dry_run: bool, result: SettingsResult
    ) -> None:
        try:
            try:
                setup = await self.client.get_code_scanning_default_setup(repo.owner, repo.name)
                state = setup.get("state", "not-configured")
            except GitHubAPIError as e:
                if not e.not_found:
                    raise
                state = "not-configured"

            if state == "configured":
                result.code_scanning = CodeScanningStatus.ALREADY_CONFIGURED
                return
            if dry_run:
                result.code_scanning = CodeScanningStatus.WOULD_ENABLE
                return

            await self.client.update_code_scanning_default_setup(
                repo.owner, repo.name, state="configured", query_suite="default"
            )
            result.code_scanning = CodeScanningStatus.ENABLED
            logger.info("{}: CodeQL default setup enabled", repo)
        except Exception as e:
            message = f"Could not enable CodeQL: {e}"
            logger.warning("{}: {}", repo, message)
            result.warnings["code_scanning"] = message
