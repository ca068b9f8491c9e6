"""Configuration management for bulkrepo."""

from bulkrepo.config.loader import load_autolinks, load_config, load_ruleset
from bulkrepo.config.models import Config, DesiredState
from bulkrepo.config.overrides import KnownKeys, apply_overrides
from bulkrepo.config.repositories import RepositoryEntry, resolve_repositories

__all__ = [
    "Config",
    "DesiredState",
    "KnownKeys",
    "RepositoryEntry",
    "apply_overrides",
    "load_autolinks",
    "load_config",
    "load_ruleset",
    "resolve_repositories",
]
