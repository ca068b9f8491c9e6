"""File sync via pull request.

Delivers one or more files to a repository through a single sync
branch and pull request. Re-running against an already synced
repository performs only reads.
"""

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from bulkrepo.errors import (
    BulkRepoError,
    GitHubAPIError,
    MissingTargetFileError,
    SourceFileError,
)
from bulkrepo.models.repository import FileSyncTarget, RepositoryIdentifier
from bulkrepo.models.results import FileSyncResult, FileSyncStatus
from bulkrepo.ports.github import GitHubPort
from bulkrepo.services.content import ContentProcessor


@dataclass
class FileState:
    """A target file as found at one ref, paired with its desired source."""

    target: FileSyncTarget
    source: str
    existing: str | None
    sha: str | None
    needs_update: bool

    @property
    def exists(self) -> bool:
        return self.existing is not None


def decode_content(data: dict[str, Any]) -> str:
    """Decode the base64 body of a contents API response."""
    return base64.b64decode(data.get("content") or "").decode("utf-8")


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _classify(
    states: list[FileState],
    all_new: FileSyncStatus,
    all_existing: FileSyncStatus,
    mixed: FileSyncStatus,
) -> FileSyncStatus:
    """Status by whether the files were new, pre-existing or both."""
    new = [s for s in states if not s.exists]
    if len(new) == len(states):
        return all_new
    if not new:
        return all_existing
    return mixed


def _render(template: str, **values: str) -> str:
    for key, value in values.items():
        template = template.replace("{" + key + "}", value)
    return template


class FileSyncEngine:
    """
    Idempotent pull-request mediated file delivery.

    Two states are reconciled: no open PR for the sync branch (diff
    against the default branch, reset the branch, commit, open a PR) and
    an open PR (diff against the PR branch, commit only what is stale).
    Existing PR titles and bodies are never edited.
    """

    def __init__(self, client: GitHubPort) -> None:
        self.client = client

    async def sync(
        self,
        repository: str,
        targets: list[FileSyncTarget],
        branch: str,
        pr_title: str,
        pr_body: str,
        processor: ContentProcessor | None = None,
        dry_run: bool = False,
        commit_message: str = "chore: sync {path}",
        require_existing: bool = False,
    ) -> FileSyncResult:
        """
        Sync ``targets`` into ``repository``.

        Args:
            repository: ``owner/name``.
            targets: Source/target pairs committed together on ``branch``.
            branch: Sync branch name, reused across runs.
            pr_title: Title of a newly opened PR.
            pr_body: Body template; ``{paths}`` and ``{branch}`` are substituted.
            processor: Optional ContentProcessor for partially managed files.
            dry_run: Perform reads only.
            commit_message: Per-file commit message; ``{path}`` is substituted.
            require_existing: Fail if a target is absent from the default branch.

        Returns:
            FileSyncResult; errors are captured, never raised.
        """
        result = FileSyncResult(dry_run=dry_run, branch=branch)
        try:
            repo = RepositoryIdentifier.parse(repository)
            sources = self._read_sources(targets)

            record = await self.client.get_repository(repo.owner, repo.name)
            base = record["default_branch"]

            states = await self._diff_against_ref(repo, targets, sources, base, processor)
            if require_existing:
                missing = [s.target.target_path for s in states if not s.exists]
                if missing:
                    raise MissingTargetFileError(
                        f"{', '.join(missing)} does not exist in {repo}", missing[0]
                    )

            pending = [s for s in states if s.needs_update]
            if not pending:
                result.status = FileSyncStatus.UNCHANGED
                logger.debug("{}: {} already in sync", repo, branch)
                return result

            pull = await self._find_open_pull(repo, branch)
            if pull is not None:
                await self._update_existing_pull(
                    repo, pull, targets, sources, branch, processor, dry_run, commit_message, result
                )
            else:
                await self._open_pull(
                    repo, base, pending, branch, pr_title, pr_body, processor, dry_run,
                    commit_message, result,
                )
        except Exception as e:
            logger.warning("{}: file sync on {} failed: {}", repository, branch, e)
            result.success = False
            result.error = str(e)
        return result

    def _read_sources(self, targets: list[FileSyncTarget]) -> dict[str, str]:
        """Read every source file up front; any failure aborts the whole sync."""
        sources = {}
        for target in targets:
            try:
                sources[target.source_path] = Path(target.source_path).read_text(encoding="utf-8")
            except OSError as e:
                raise SourceFileError(
                    f"Failed to read source file {target.source_path}: {e}", target.source_path
                ) from e
        return sources

    async def _diff_against_ref(
        self,
        repo: RepositoryIdentifier,
        targets: list[FileSyncTarget],
        sources: dict[str, str],
        ref: str,
        processor: ContentProcessor | None,
    ) -> list[FileState]:
        """Compare every target at ``ref`` with its source."""
        states = []
        for target in targets:
            source = sources[target.source_path]
            try:
                data = await self.client.get_content(repo.owner, repo.name, target.target_path, ref)
            except GitHubAPIError as e:
                if not e.not_found:
                    raise
                states.append(FileState(target, source, None, None, needs_update=True))
                continue

            if not isinstance(data, dict):
                raise BulkRepoError(f"{target.target_path} in {repo} is not a file")
            existing = decode_content(data)
            if processor is not None:
                comparable = processor.extract_comparable(existing)
                desired = processor.comparable_source(source)
            else:
                comparable, desired = existing, source
            states.append(
                FileState(
                    target,
                    source,
                    existing,
                    data.get("sha"),
                    needs_update=comparable.strip() != desired.strip(),
                )
            )
        return states

    async def _find_open_pull(self, repo: RepositoryIdentifier, branch: str) -> dict[str, Any] | None:
        """Open PR from the sync branch. Listing errors count as no PR."""
        try:
            pulls = await self.client.list_pulls(
                repo.owner, repo.name, state="open", head=f"{repo.owner}:{branch}"
            )
        except Exception as e:
            logger.warning("{}: could not list pull requests for {}: {}", repo, branch, e)
            return None
        return pulls[0] if pulls else None

    async def _commit(
        self,
        repo: RepositoryIdentifier,
        state: FileState,
        branch: str,
        processor: ContentProcessor | None,
        commit_message: str,
    ) -> None:
        if processor is not None:
            content = processor.merge_final(state.source, state.existing)
        else:
            content = state.source
        await self.client.create_or_update_file_contents(
            repo.owner,
            repo.name,
            path=state.target.target_path,
            message=_render(commit_message, path=state.target.target_path),
            content=encode_content(content),
            branch=branch,
            sha=state.sha,
        )

    async def _update_existing_pull(
        self,
        repo: RepositoryIdentifier,
        pull: dict[str, Any],
        targets: list[FileSyncTarget],
        sources: dict[str, str],
        branch: str,
        processor: ContentProcessor | None,
        dry_run: bool,
        commit_message: str,
        result: FileSyncResult,
    ) -> None:
        result.pr_number = pull.get("number")
        result.pr_url = pull.get("html_url")

        # The PR branch may carry partial or stale updates
        states = await self._diff_against_ref(repo, targets, sources, branch, processor)
        pending = [s for s in states if s.needs_update]
        result.files = [s.target.target_path for s in pending]
        if not pending:
            result.status = FileSyncStatus.PR_UP_TO_DATE
            logger.info("{}: PR #{} on {} is up to date", repo, result.pr_number, branch)
            return

        if dry_run:
            result.status = FileSyncStatus.WOULD_UPDATE_PR
            return

        for state in pending:
            await self._commit(repo, state, branch, processor, commit_message)
        result.status = _classify(
            pending,
            FileSyncStatus.PR_UPDATED_CREATED,
            FileSyncStatus.PR_UPDATED,
            FileSyncStatus.PR_UPDATED_MIXED,
        )
        logger.info("{}: updated PR #{} ({})", repo, result.pr_number, ", ".join(result.files))

    async def _open_pull(
        self,
        repo: RepositoryIdentifier,
        base: str,
        pending: list[FileState],
        branch: str,
        pr_title: str,
        pr_body: str,
        processor: ContentProcessor | None,
        dry_run: bool,
        commit_message: str,
        result: FileSyncResult,
    ) -> None:
        result.files = [s.target.target_path for s in pending]
        if dry_run:
            result.status = _classify(
                pending,
                FileSyncStatus.WOULD_CREATE,
                FileSyncStatus.WOULD_UPDATE,
                FileSyncStatus.WOULD_UPDATE,
            )
            return

        await self._reset_branch(repo, base, branch)
        for state in pending:
            await self._commit(repo, state, branch, processor, commit_message)

        paths = "\n".join(f"- `{path}`" for path in result.files)
        pull = await self.client.create_pull(
            repo.owner,
            repo.name,
            title=pr_title,
            body=_render(pr_body, paths=paths, branch=branch),
            head=branch,
            base=base,
        )
        result.pr_number = pull.get("number")
        result.pr_url = pull.get("html_url")
        result.status = _classify(
            pending, FileSyncStatus.CREATED, FileSyncStatus.UPDATED, FileSyncStatus.MIXED
        )
        logger.info("{}: opened PR #{} from {}", repo, result.pr_number, branch)

    async def _reset_branch(self, repo: RepositoryIdentifier, base: str, branch: str) -> None:
        """Point ``branch`` at the default branch tip, creating it if absent."""
        base_ref = await self.client.get_ref(repo.owner, repo.name, f"heads/{base}")
        base_sha = base_ref["object"]["sha"]

        try:
            existing = await self.client.get_ref(repo.owner, repo.name, f"heads/{branch}")
        except GitHubAPIError as e:
            if not e.not_found:
                raise
            await self.client.create_ref(repo.owner, repo.name, f"refs/heads/{branch}", base_sha)
            return

        # Discards any commits on the branch that never made it into a merged PR
        if existing["object"]["sha"] != base_sha:
            logger.warning(
                "{}: resetting {} to {} tip; unmerged commits on it are discarded",
                repo,
                branch,
                base,
            )
        await self.client.update_ref(repo.owner, repo.name, f"heads/{branch}", base_sha, force=True)
