"""Ruleset reconciler.

Creates or updates one named ruleset and optionally deletes every
other ruleset on the repository.
"""

from typing import Any

from loguru import logger

from bulkrepo.models.repository import RepositoryIdentifier, RulesetSpec
from bulkrepo.models.results import RulesetResult, RulesetStatus
from bulkrepo.ports.github import GitHubPort
from bulkrepo.utils.comparison import pick, structurally_equal

READ_ONLY_RULESET_FIELDS: frozenset[str] = frozenset(
    {
        "id",
        "source",
        "source_type",
        "node_id",
        "_links",
        "created_at",
        "updated_at",
        "current_user_can_bypass",
    }
)

COMPARED_FIELDS: tuple[str, ...] = tuple(RulesetSpec.model_fields)


def comparable_ruleset(document: dict[str, Any]) -> dict[str, Any]:
    """Strip API-only fields and restrict to the managed field set."""
    stripped = {k: v for k, v in document.items() if k not in READ_ONLY_RULESET_FIELDS}
    return {k: v for k, v in pick(stripped, COMPARED_FIELDS).items() if v is not None}


def rulesets_equal(existing: dict[str, Any], desired: dict[str, Any]) -> bool:
    """
    Compare a remote ruleset with the desired document.

    API-only fields are ignored, as are optional fields the desired
    document leaves out. Key and list order do not matter.
    """
    right = comparable_ruleset(desired)
    left = pick(comparable_ruleset(existing), right)
    equal = structurally_equal(left, right)
    if not equal:
        for key in sorted(set(left) | set(right)):
            if not structurally_equal(left.get(key), right.get(key)):
                logger.debug(
                    "Ruleset difference in '{}': {} != {}", key, left.get(key), right.get(key)
                )
    return equal


class RulesetReconciler:
    """Reconciles one managed ruleset, matched by name."""

    def __init__(self, client: GitHubPort) -> None:
        self.client = client

    async def reconcile(
        self,
        repository: str,
        ruleset: RulesetSpec,
        delete_unmanaged: bool = False,
        dry_run: bool = False,
    ) -> RulesetResult:
        result = RulesetResult(dry_run=dry_run, name=ruleset.name)
        try:
            repo = RepositoryIdentifier.parse(repository)
            existing = await self.client.list_rulesets(repo.owner, repo.name)
        except Exception as e:
            return self._failed(repository, ruleset.name, e, result)

        match = next((r for r in existing if r.get("name") == ruleset.name), None)
        payload = ruleset.to_payload()
        try:
            if match is None:
                await self._create(repo, payload, dry_run, result)
            else:
                await self._update(repo, match["id"], payload, dry_run, result)
        except Exception as e:
            self._failed(repository, ruleset.name, e, result)

        if delete_unmanaged:
            others = [r for r in existing if r.get("name") != ruleset.name]
            await self._delete_others(repo, others, dry_run, result)
        return result

    def _failed(
        self, repository: str, name: str, error: Exception, result: RulesetResult
    ) -> RulesetResult:
        logger.warning("{}: ruleset '{}' sync failed: {}", repository, name, error)
        result.success = False
        result.error = str(error)
        return result

    async def _create(
        self,
        repo: RepositoryIdentifier,
        payload: dict[str, Any],
        dry_run: bool,
        result: RulesetResult,
    ) -> None:
        if dry_run:
            result.status = RulesetStatus.WOULD_CREATE
            return
        created = await self.client.create_ruleset(repo.owner, repo.name, payload)
        result.ruleset_id = created.get("id")
        result.status = RulesetStatus.CREATED
        logger.info("{}: created ruleset '{}'", repo, result.name)

    async def _update(
        self,
        repo: RepositoryIdentifier,
        ruleset_id: int,
        payload: dict[str, Any],
        dry_run: bool,
        result: RulesetResult,
    ) -> None:
        result.ruleset_id = ruleset_id
        current = await self.client.get_ruleset(repo.owner, repo.name, ruleset_id)
        if rulesets_equal(current, payload):
            result.status = RulesetStatus.UNCHANGED
            return
        if dry_run:
            result.status = RulesetStatus.WOULD_UPDATE
            return
        await self.client.update_ruleset(repo.owner, repo.name, ruleset_id, payload)
        result.status = RulesetStatus.UPDATED
        logger.info("{}: updated ruleset '{}'", repo, result.name)

    async def _delete_others(
        self,
        repo: RepositoryIdentifier,
        others: list[dict[str, Any]],
        dry_run: bool,
        result: RulesetResult,
    ) -> None:
        """Delete unmanaged rulesets one by one; a failure affects only that ruleset."""
        for other in others:
            name = other.get("name") or str(other.get("id"))
            if dry_run:
                result.would_delete.append(name)
                continue
            try:
                await self.client.delete_ruleset(repo.owner, repo.name, other["id"])
                result.deleted.append(name)
                logger.info("{}: deleted unmanaged ruleset '{}'", repo, name)
            except Exception as e:
                logger.warning("{}: could not delete ruleset '{}': {}", repo, name, e)
                result.delete_errors[name] = str(e)
