"""Pydantic configuration models for bulkrepo."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from bulkrepo.models.repository import AutolinkSpec, FileSyncTarget

# Merge/branch settings read from and written to the repository record
SETTINGS_FIELDS: tuple[str, ...] = (
    "allow_squash_merge",
    "allow_merge_commit",
    "allow_rebase_merge",
    "allow_auto_merge",
    "delete_branch_on_merge",
    "allow_update_branch",
)


def _split_comma_list(v: object) -> object:
    """Accept a comma-separated string as well as a list."""
    if isinstance(v, str):
        return [t.strip() for t in v.split(",") if t.strip()]
    return v


class GitHubConfig(BaseModel):
    """GitHub API connection configuration."""

    token: str = ""
    api_url: str = "https://api.github.com"
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    user_agent: str = "bulkrepo"

    @field_validator("api_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format and strip trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v.rstrip("/")


class LoggingConfig(BaseModel):
    """Logging configuration for loguru."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class SettingsConfig(BaseModel):
    """Merge and branch settings. ``None`` leaves the setting untouched."""

    allow_squash_merge: bool | None = None
    allow_merge_commit: bool | None = None
    allow_rebase_merge: bool | None = None
    allow_auto_merge: bool | None = None
    delete_branch_on_merge: bool | None = None
    allow_update_branch: bool | None = None

    def touched(self) -> dict[str, bool]:
        """Settings with a desired value, in declaration order."""
        values = self.model_dump()
        return {name: values[name] for name in SETTINGS_FIELDS if values[name] is not None}


class SecurityConfig(BaseModel):
    """Code scanning and security toggles. ``None`` leaves the toggle untouched."""

    enable_code_scanning: bool | None = None
    immutable_releases: bool | None = None
    secret_scanning: bool | None = None
    secret_scanning_push_protection: bool | None = None
    dependabot_alerts: bool | None = None
    dependabot_security_updates: bool | None = None

    def requested(self) -> bool:
        """True if code scanning is enabled or any toggle has a desired value."""
        toggles = self.model_dump(exclude={"enable_code_scanning"})
        return self.enable_code_scanning is True or any(v is not None for v in toggles.values())


class FileSyncConfig(BaseModel, ABC):
    """Branch and pull request settings shared by every file sync.

    Subclasses define ``targets`` for their kind of file.
    """

    branch: str
    pr_title: str
    pr_body: str = (
        "This PR syncs the following files with the organization standard:\n\n{paths}\n\n"
        "Generated by bulkrepo on branch `{branch}`."
    )
    commit_message: str = "chore: sync {path}"

    @abstractmethod
    def targets(self) -> list[FileSyncTarget]:
        """Files to sync, or an empty list when the sync is not configured."""
        ...

    @property
    def enabled(self) -> bool:
        return bool(self.targets())


class SingleFileSyncConfig(FileSyncConfig):
    """A file sync with exactly one source and one target path."""

    source: Path | None = None
    target: str

    def targets(self) -> list[FileSyncTarget]:
        if self.source is None:
            return []
        return [FileSyncTarget(source_path=str(self.source), target_path=self.target)]


class DependabotConfig(SingleFileSyncConfig):
    """Managed ``.github/dependabot.yml``."""

    target: str = ".github/dependabot.yml"
    branch: str = "dependabot-yml-sync"
    pr_title: str = "chore: update dependabot.yml"


class GitignoreConfig(SingleFileSyncConfig):
    """Managed ``.gitignore`` with a preserved repository-specific section."""

    target: str = ".gitignore"
    branch: str = "gitignore-sync"
    pr_title: str = "chore: update .gitignore"


class PullRequestTemplateConfig(SingleFileSyncConfig):
    """Managed pull request template."""

    target: str = ".github/pull_request_template.md"
    branch: str = "pull-request-template-sync"
    pr_title: str = "chore: update pull request template"


class WorkflowFilesConfig(FileSyncConfig):
    """Managed workflow files, delivered together in one pull request."""

    sources: list[Path] = Field(default_factory=list)
    targets_: list[str] | None = Field(default=None, alias="targets")
    branch: str = "workflow-files-sync"
    pr_title: str = "chore: sync workflow files"

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_counts(self) -> "WorkflowFilesConfig":
        """Explicit targets must pair up with sources."""
        if self.targets_ is not None and len(self.targets_) != len(self.sources):
            raise ValueError(
                f"workflow targets ({len(self.targets_)}) must match sources ({len(self.sources)})"
            )
        return self

    def targets(self) -> list[FileSyncTarget]:
        paths = self.targets_
        if paths is None:
            paths = [f".github/workflows/{src.name}" for src in self.sources]
        return [
            FileSyncTarget(source_path=str(src), target_path=dst)
            for src, dst in zip(self.sources, paths, strict=True)
        ]


class PackageJsonConfig(SingleFileSyncConfig):
    """Selected top-level fields merged into an existing ``package.json``."""

    target: str = "package.json"
    branch: str = "package-json-sync"
    pr_title: str = "chore: update package.json"
    merge_fields: list[Literal["scripts", "engines"]] = Field(
        default_factory=lambda: ["scripts", "engines"], min_length=1
    )


class RulesetConfig(BaseModel):
    """Managed repository ruleset."""

    file: Path | None = None
    delete_unmanaged: bool = False


class AutolinksConfig(BaseModel):
    """Managed autolinks, inline or from a YAML/JSON file."""

    file: Path | None = None
    links: list[AutolinkSpec] | None = None

    @property
    def enabled(self) -> bool:
        return self.file is not None or self.links is not None


class DesiredState(BaseModel):
    """Everything a repository should look like. Per-repository overrides apply here."""

    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    topics: list[str] | None = None
    dependabot: DependabotConfig = Field(default_factory=DependabotConfig)
    gitignore: GitignoreConfig = Field(default_factory=GitignoreConfig)
    pull_request_template: PullRequestTemplateConfig = Field(
        default_factory=PullRequestTemplateConfig
    )
    workflows: WorkflowFilesConfig = Field(default_factory=WorkflowFilesConfig)
    package_json: PackageJsonConfig = Field(default_factory=PackageJsonConfig)
    ruleset: RulesetConfig = Field(default_factory=RulesetConfig)
    autolinks: AutolinksConfig = Field(default_factory=AutolinksConfig)

    @field_validator("topics", mode="before")
    @classmethod
    def split_topics(cls, v: object) -> object:
        return _split_comma_list(v)

    def has_work(self) -> bool:
        """True if at least one setting or resource is requested."""
        return bool(
            self.settings.touched()
            or self.security.requested()
            or self.topics is not None
            or self.dependabot.enabled
            or self.gitignore.enabled
            or self.pull_request_template.enabled
            or self.workflows.enabled
            or self.package_json.enabled
            or self.ruleset.file is not None
            or self.autolinks.enabled
        )


class Config(BaseSettings):
    """Root configuration for bulkrepo."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dry_run: bool = False

    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    topics: list[str] | None = None
    dependabot: DependabotConfig = Field(default_factory=DependabotConfig)
    gitignore: GitignoreConfig = Field(default_factory=GitignoreConfig)
    pull_request_template: PullRequestTemplateConfig = Field(
        default_factory=PullRequestTemplateConfig
    )
    workflows: WorkflowFilesConfig = Field(default_factory=WorkflowFilesConfig)
    package_json: PackageJsonConfig = Field(default_factory=PackageJsonConfig)
    ruleset: RulesetConfig = Field(default_factory=RulesetConfig)
    autolinks: AutolinksConfig = Field(default_factory=AutolinksConfig)

    @field_validator("topics", mode="before")
    @classmethod
    def split_topics(cls, v: object) -> object:
        return _split_comma_list(v)

    model_config = {
        "env_prefix": "BULKREPO_",
        "env_nested_delimiter": "__",
    }

    def desired_state(self) -> DesiredState:
        """Global desired state shared by every repository before overrides."""
        return DesiredState.model_validate(
            self.model_dump(exclude={"github", "logging", "dry_run"}, by_alias=True)
        )
