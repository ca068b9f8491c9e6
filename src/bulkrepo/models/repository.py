"""Repository identifiers and desired-state specs."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bulkrepo.errors import InvalidRepositoryError


@dataclass(frozen=True)
class RepositoryIdentifier:
    """An owner/name pair."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryIdentifier":
        """Parse ``owner/name``, rejecting missing or empty parts."""
        owner, sep, name = value.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise InvalidRepositoryError(value)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class FileSyncTarget:
    """A local source file and the path it is delivered to in the repository."""

    source_path: str
    target_path: str


class RulesetSpec(BaseModel):
    """
    Desired repository ruleset.

    ``name`` is the natural key. Only the fields declared here take part
    in comparison with the remote ruleset.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    target: str = "branch"
    enforcement: str = "active"
    bypass_actors: list[dict[str, Any]] | None = None
    conditions: dict[str, Any] | None = None
    rules: list[dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Full document posted on create and update."""
        return self.model_dump(exclude_none=True)


class AutolinkSpec(BaseModel):
    """Desired autolink. ``key_prefix`` is immutable identity."""

    key_prefix: str = Field(min_length=1)
    url_template: str = Field(min_length=1)
    is_alphanumeric: bool = True

    def matches(self, existing: dict[str, Any]) -> bool:
        return (
            existing.get("key_prefix") == self.key_prefix
            and existing.get("url_template") == self.url_template
            and existing.get("is_alphanumeric", True) == self.is_alphanumeric
        )
