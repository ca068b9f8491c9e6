"""Domain models for bulkrepo."""

from bulkrepo.models.repository import (
    AutolinkSpec,
    FileSyncTarget,
    RepositoryIdentifier,
    RulesetSpec,
)
from bulkrepo.models.results import (
    AutolinkResult,
    AutolinkStatus,
    ChangeRecord,
    CodeScanningStatus,
    FileSyncResult,
    FileSyncStatus,
    RepositoryResult,
    RulesetResult,
    RulesetStatus,
    SettingsResult,
    ToggleResult,
    ToggleStatus,
    TopicsStatus,
)

__all__ = [
    "AutolinkResult",
    "AutolinkSpec",
    "AutolinkStatus",
    "ChangeRecord",
    "CodeScanningStatus",
    "FileSyncResult",
    "FileSyncStatus",
    "FileSyncTarget",
    "RepositoryIdentifier",
    "RepositoryResult",
    "RulesetResult",
    "RulesetSpec",
    "RulesetStatus",
    "SettingsResult",
    "ToggleResult",
    "ToggleStatus",
    "TopicsStatus",
]
