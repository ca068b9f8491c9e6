"""Result models produced by the reconcilers.

Every reconciler returns one of these instead of raising, so one
failing resource never hides the outcome of another.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class TopicsStatus(StrEnum):
    """Outcome of topic reconciliation."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    WOULD_UPDATE = "would-update"


class CodeScanningStatus(StrEnum):
    """Outcome of code scanning default setup."""

    ALREADY_CONFIGURED = "already-configured"
    ENABLED = "enabled"
    WOULD_ENABLE = "would-enable"


class ToggleStatus(StrEnum):
    """Outcome of a single security toggle."""

    UNCHANGED = "unchanged"
    ENABLED = "enabled"
    DISABLED = "disabled"
    WOULD_ENABLE = "would-enable"
    WOULD_DISABLE = "would-disable"


class FileSyncStatus(StrEnum):
    """Outcome of a pull-request mediated file sync."""

    UNCHANGED = "unchanged"
    CREATED = "created"
    UPDATED = "updated"
    MIXED = "mixed"
    PR_UP_TO_DATE = "pr-up-to-date"
    PR_UPDATED = "pr-updated"
    PR_UPDATED_CREATED = "pr-updated-created"
    PR_UPDATED_MIXED = "pr-updated-mixed"
    WOULD_CREATE = "would-create"
    WOULD_UPDATE = "would-update"
    WOULD_UPDATE_PR = "would-update-pr"


class RulesetStatus(StrEnum):
    """Outcome of ruleset reconciliation."""

    UNCHANGED = "unchanged"
    CREATED = "created"
    UPDATED = "updated"
    WOULD_CREATE = "would-create"
    WOULD_UPDATE = "would-update"


class AutolinkStatus(StrEnum):
    """Outcome of autolink reconciliation."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    WOULD_UPDATE = "would-update"


class ChangeRecord(BaseModel):
    """A single field whose actual value differs from the desired one."""

    model_config = ConfigDict(populate_by_name=True)

    field: str
    from_value: Any = Field(alias="from")
    to_value: Any = Field(alias="to")

    def __str__(self) -> str:
        return f"{self.field}: {self.from_value} -> {self.to_value}"


class ToggleResult(BaseModel):
    """State of one security toggle before and after reconciliation."""

    current: bool
    desired: bool
    status: ToggleStatus


class SettingsResult(BaseModel):
    """Outcome of merge settings, topics, code scanning and security toggles."""

    repository: str
    success: bool = True
    error: str | None = None
    dry_run: bool = False

    access_denied: bool = False
    insufficient_permissions: bool = False

    changes: list[ChangeRecord] = Field(default_factory=list)
    payload: dict[str, Any] | None = None

    topics_status: TopicsStatus | None = None
    topics: list[str] | None = None
    topics_added: list[str] = Field(default_factory=list)
    topics_removed: list[str] = Field(default_factory=list)

    code_scanning: CodeScanningStatus | None = None

    toggles: dict[str, ToggleResult] = Field(default_factory=dict)

    # Non-fatal problems keyed by sub-resource (topics, code_scanning, toggle name)
    warnings: dict[str, str] = Field(default_factory=dict)

    @property
    def changed(self) -> bool:
        if self.changes:
            return True
        if self.topics_status in (TopicsStatus.UPDATED, TopicsStatus.WOULD_UPDATE):
            return True
        if self.code_scanning in (CodeScanningStatus.ENABLED, CodeScanningStatus.WOULD_ENABLE):
            return True
        return any(t.status != ToggleStatus.UNCHANGED for t in self.toggles.values())


class FileSyncResult(BaseModel):
    """Outcome of delivering one or more files through a sync branch and PR."""

    success: bool = True
    error: str | None = None
    dry_run: bool = False
    status: FileSyncStatus | None = None
    branch: str | None = None
    files: list[str] = Field(default_factory=list)
    pr_number: int | None = None
    pr_url: str | None = None

    @property
    def changed(self) -> bool:
        return self.status not in (
            None,
            FileSyncStatus.UNCHANGED,
            FileSyncStatus.PR_UP_TO_DATE,
        )


class RulesetResult(BaseModel):
    """Outcome of reconciling one named ruleset."""

    success: bool = True
    error: str | None = None
    dry_run: bool = False
    name: str | None = None
    status: RulesetStatus | None = None
    ruleset_id: int | None = None
    deleted: list[str] = Field(default_factory=list)
    would_delete: list[str] = Field(default_factory=list)
    delete_errors: dict[str, str] = Field(default_factory=dict)

    @property
    def changed(self) -> bool:
        if self.deleted or self.would_delete:
            return True
        return self.status not in (None, RulesetStatus.UNCHANGED)


class AutolinkResult(BaseModel):
    """Outcome of reconciling the autolink set."""

    success: bool = True
    error: str | None = None
    dry_run: bool = False
    status: AutolinkStatus | None = None
    created: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.status not in (None, AutolinkStatus.UNCHANGED)


class RepositoryResult(BaseModel):
    """Aggregate per-repository result, one namespaced field per resource."""

    repository: str
    dry_run: bool = False
    settings: SettingsResult | None = None
    files: dict[str, FileSyncResult] = Field(default_factory=dict)
    ruleset: RulesetResult | None = None
    autolinks: AutolinkResult | None = None

    def _resource_results(self) -> list[Any]:
        results: list[Any] = [self.settings, self.ruleset, self.autolinks]
        results.extend(self.files.values())
        return [r for r in results if r is not None]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return all(r.success for r in self._resource_results())

    @property
    def changed(self) -> bool:
        return any(r.changed for r in self._resource_results())

    @property
    def errors(self) -> list[str]:
        """Fatal errors of each failed resource, prefixed by resource name."""
        errors = []
        if self.settings and not self.settings.success:
            errors.append(f"settings: {self.settings.error}")
        for key, file_result in self.files.items():
            if not file_result.success:
                errors.append(f"{key}: {file_result.error}")
        if self.ruleset and not self.ruleset.success:
            errors.append(f"ruleset: {self.ruleset.error}")
        if self.autolinks and not self.autolinks.success:
            errors.append(f"autolinks: {self.autolinks.error}")
        return errors
