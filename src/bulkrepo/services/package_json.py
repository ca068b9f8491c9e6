"""package.json field reconciler.

Merges selected top-level fields (``scripts``, ``engines``) from a source
document into a repository's existing package.json through the file-sync
engine. Every other field of the target is kept as is.
"""

import json
from collections.abc import Sequence
from typing import Any

from bulkrepo.config.models import PackageJsonConfig
from bulkrepo.errors import PackageJsonError
from bulkrepo.models.results import FileSyncResult
from bulkrepo.ports.github import GitHubPort
from bulkrepo.services.file_sync import FileSyncEngine
from bulkrepo.utils.comparison import normalize_for_comparison, pick


def _parse(text: str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PackageJsonError(f"Invalid JSON in {what}: {e}") from e
    if not isinstance(data, dict):
        raise PackageJsonError(f"{what} must contain a JSON object")
    return data


class PackageJsonFieldsProcessor:
    """ContentProcessor comparing and merging only the selected fields."""

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)

    def _canonical(self, document: dict[str, Any]) -> str:
        selected = normalize_for_comparison(pick(document, self.fields), sort_lists=False)
        return json.dumps(selected, sort_keys=True, indent=2)

    def comparable_source(self, source: str) -> str:
        return self._canonical(_parse(source, "source package.json"))

    def extract_comparable(self, existing: str) -> str:
        return self._canonical(_parse(existing, "target package.json"))

    def merge_final(self, source: str, existing: str | None) -> str:
        if existing is None:
            raise PackageJsonError("package.json does not exist in the repository")
        merged = _parse(existing, "target package.json")
        merged.update(pick(_parse(source, "source package.json"), self.fields))
        return json.dumps(merged, indent=2, ensure_ascii=False) + "\n"


class PackageJsonReconciler:
    """Sync ``scripts`` and/or ``engines`` into an existing package.json."""

    def __init__(self, client: GitHubPort) -> None:
        self.engine = FileSyncEngine(client)

    async def reconcile(
        self, repository: str, config: PackageJsonConfig, dry_run: bool = False
    ) -> FileSyncResult:
        if config.source is None:
            return FileSyncResult(
                success=False, error="No package.json source configured", dry_run=dry_run
            )

        # Only fields the source actually defines are managed
        try:
            source = _parse(config.source.read_text(encoding="utf-8"), "source package.json")
        except (OSError, PackageJsonError) as e:
            return FileSyncResult(success=False, error=str(e), dry_run=dry_run)
        fields = [f for f in config.merge_fields if f in source]
        if not fields:
            return FileSyncResult(
                success=False,
                error=f"Source package.json defines none of: {', '.join(config.merge_fields)}",
                dry_run=dry_run,
            )

        return await self.engine.sync(
            repository,
            config.targets(),
            branch=config.branch,
            pr_title=config.pr_title,
            pr_body=config.pr_body,
            processor=PackageJsonFieldsProcessor(fields),
            dry_run=dry_run,
            commit_message=config.commit_message,
            require_existing=True,
        )
