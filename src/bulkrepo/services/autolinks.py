"""Autolink reconciler.

Autolinks have no update verb and ``key_prefix`` is their identity, so
a changed entry is deleted and recreated.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from bulkrepo.models.repository import AutolinkSpec, RepositoryIdentifier
from bulkrepo.models.results import AutolinkResult, AutolinkStatus
from bulkrepo.ports.github import GitHubPort


@dataclass
class AutolinkPlan:
    """Autolinks to create, delete and leave alone."""

    create: list[AutolinkSpec] = field(default_factory=list)
    delete: list[dict[str, Any]] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.create and not self.delete


def plan_autolinks(desired: list[AutolinkSpec], existing: list[dict[str, Any]]) -> AutolinkPlan:
    """Diff desired autolinks against existing ones keyed by ``key_prefix``."""
    plan = AutolinkPlan()
    by_prefix = {link.get("key_prefix"): link for link in existing}
    desired_prefixes = {spec.key_prefix for spec in desired}

    for spec in desired:
        current = by_prefix.get(spec.key_prefix)
        if current is not None and spec.matches(current):
            plan.unchanged.append(spec.key_prefix)
            continue
        plan.create.append(spec)
        if current is not None:
            plan.delete.append(current)

    plan.delete.extend(
        link for link in existing if link.get("key_prefix") not in desired_prefixes
    )
    return plan


class AutolinkReconciler:
    """Reconciles the full autolink set of a repository."""

    def __init__(self, client: GitHubPort) -> None:
        self.client = client

    async def reconcile(
        self, repository: str, autolinks: list[AutolinkSpec], dry_run: bool = False
    ) -> AutolinkResult:
        result = AutolinkResult(dry_run=dry_run)
        try:
            repo = RepositoryIdentifier.parse(repository)
            existing = await self.client.list_autolinks(repo.owner, repo.name)
            plan = plan_autolinks(autolinks, existing)

            result.unchanged = plan.unchanged
            result.created = [spec.key_prefix for spec in plan.create]
            result.deleted = [link.get("key_prefix", "") for link in plan.delete]

            if plan.empty:
                result.status = AutolinkStatus.UNCHANGED
                return result
            if dry_run:
                result.status = AutolinkStatus.WOULD_UPDATE
                return result

            # Delete first: a recreated prefix would otherwise collide
            for link in plan.delete:
                await self.client.delete_autolink(repo.owner, repo.name, link["id"])
            for spec in plan.create:
                await self.client.create_autolink(
                    repo.owner,
                    repo.name,
                    key_prefix=spec.key_prefix,
                    url_template=spec.url_template,
                    is_alphanumeric=spec.is_alphanumeric,
                )
            result.status = AutolinkStatus.UPDATED
            logger.info(
                "{}: autolinks created={} deleted={}", repo, result.created, result.deleted
            )
        except Exception as e:
            logger.warning("{}: autolink sync failed: {}", repository, e)
            result.success = False
            result.error = str(e)
        return result
