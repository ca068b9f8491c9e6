"""Security toggle reconciliation.

Immutable releases, secret scanning, push protection, Dependabot alerts
and Dependabot security updates all follow the same read, diff, apply
pattern. Each is described by a ToggleDescriptor and reconciled by one
routine.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from bulkrepo.errors import GitHubAPIError
from bulkrepo.models.repository import RepositoryIdentifier
from bulkrepo.models.results import SettingsResult, ToggleResult, ToggleStatus
from bulkrepo.ports.github import GitHubPort

ReadFn = Callable[[GitHubPort, RepositoryIdentifier, dict[str, Any]], Awaitable[bool]]
WriteFn = Callable[[GitHubPort, RepositoryIdentifier], Awaitable[Any]]


@dataclass(frozen=True)
class ToggleDescriptor:
    """How to read, enable and disable one security toggle."""

    name: str
    label: str
    read: ReadFn
    enable: WriteFn
    disable: WriteFn


def _endpoint_toggle(name: str, label: str, endpoint: str, body_flag: bool) -> ToggleDescriptor:
    """
    Toggle backed by a dedicated GET/PUT/DELETE endpoint.

    A 404 on read means disabled. When ``body_flag`` is set the GET body
    carries ``enabled``; otherwise a successful GET alone means enabled.
    """

    async def read(gh: GitHubPort, repo: RepositoryIdentifier, record: dict[str, Any]) -> bool:
        try:
            data = await gh.request("GET", f"/repos/{repo.owner}/{repo.name}/{endpoint}")
        except GitHubAPIError as e:
            if e.not_found:
                return False
            raise
        if body_flag:
            return bool((data or {}).get("enabled", False))
        return True

    async def enable(gh: GitHubPort, repo: RepositoryIdentifier) -> Any:
        return await gh.request("PUT", f"/repos/{repo.owner}/{repo.name}/{endpoint}")

    async def disable(gh: GitHubPort, repo: RepositoryIdentifier) -> Any:
        return await gh.request("DELETE", f"/repos/{repo.owner}/{repo.name}/{endpoint}")

    return ToggleDescriptor(name=name, label=label, read=read, enable=enable, disable=disable)


def _security_analysis_toggle(name: str, label: str, key: str) -> ToggleDescriptor:
    """Toggle stored in the repository record's ``security_and_analysis`` block."""

    async def read(gh: GitHubPort, repo: RepositoryIdentifier, record: dict[str, Any]) -> bool:
        section = (record.get("security_and_analysis") or {}).get(key) or {}
        return section.get("status") == "enabled"

    def _writer(status: str) -> WriteFn:
        async def write(gh: GitHubPort, repo: RepositoryIdentifier) -> Any:
            return await gh.update_repository(
                repo.owner, repo.name, security_and_analysis={key: {"status": status}}
            )

        return write

    return ToggleDescriptor(
        name=name, label=label, read=read, enable=_writer("enabled"), disable=_writer("disabled")
    )


TOGGLES: tuple[ToggleDescriptor, ...] = (
    _endpoint_toggle("immutable_releases", "immutable releases", "immutable-releases", True),
    _security_analysis_toggle("secret_scanning", "secret scanning", "secret_scanning"),
    _security_analysis_toggle(
        "secret_scanning_push_protection",
        "secret scanning push protection",
        "secret_scanning_push_protection",
    ),
    _endpoint_toggle("dependabot_alerts", "Dependabot alerts", "vulnerability-alerts", False),
    _endpoint_toggle(
        "dependabot_security_updates",
        "Dependabot security updates",
        "automated-security-fixes",
        True,
    ),
)


async def reconcile_toggle(
    gh: GitHubPort,
    repo: RepositoryIdentifier,
    record: dict[str, Any],
    toggle: ToggleDescriptor,
    desired: bool,
    dry_run: bool,
    result: SettingsResult,
) -> None:
    """
    Bring one toggle to ``desired``.

    Failures are recorded as ``result.warnings[toggle.name]`` and never
    raised, so other toggles are still attempted.
    """
    try:
        current = await toggle.read(gh, repo, record)
        if current == desired:
            status = ToggleStatus.UNCHANGED
        elif dry_run:
            status = ToggleStatus.WOULD_ENABLE if desired else ToggleStatus.WOULD_DISABLE
        else:
            await (toggle.enable if desired else toggle.disable)(gh, repo)
            status = ToggleStatus.ENABLED if desired else ToggleStatus.DISABLED
            logger.info("{}: {} {}", repo, toggle.label, status.value)
        result.toggles[toggle.name] = ToggleResult(current=current, desired=desired, status=status)
    except Exception as e:
        message = f"Could not update {toggle.label}: {e}"
        logger.warning("{}: {}", repo, message)
        result.warnings[toggle.name] = message
