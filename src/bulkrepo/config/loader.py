"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

import yaml

from bulkrepo.config.models import AutolinksConfig, Config
from bulkrepo.errors import ConfigurationError
from bulkrepo.models.repository import AutolinkSpec, RulesetSpec


def load_config(config_path: Path | None) -> Config:
    """
    Load configuration from YAML file or return defaults.

    Environment variables prefixed ``BULKREPO_`` fill in anything
    the file leaves out.

    Args:
        config_path: Path to YAML config file, or None for defaults.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config_path doesn't exist.
        ValueError: If YAML is invalid.
    """
    if config_path is None:
        return Config()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping, not {type(data).__name__}")

    return Config(**data)


def _read_document(path: Path, what: str) -> Any:
    """Read a JSON or YAML document."""
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"Failed to read {what} file {path}: {e}") from e
    try:
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse {what} file {path}: {e}") from e


def load_ruleset(path: Path) -> RulesetSpec:
    """Load and validate a ruleset document. ``name`` is mandatory."""
    data = _read_document(path, "ruleset")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Ruleset file {path} must contain a JSON object")
    if not data.get("name"):
        raise ConfigurationError(f'Ruleset file {path} must have a "name" field')
    return RulesetSpec.model_validate(data)


def load_autolinks(config: AutolinksConfig) -> list[AutolinkSpec]:
    """Resolve inline autolinks or load them from ``config.file``."""
    if config.links is not None:
        return list(config.links)
    if config.file is None:
        return []

    data = _read_document(config.file, "autolinks")
    if isinstance(data, dict):
        data = data.get("autolinks")
    if not isinstance(data, list):
        raise ConfigurationError(
            f'Autolinks file {config.file} must contain an "autolinks" array'
        )

    links = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get("key_prefix") or not entry.get(
            "url_template"
        ):
            raise ConfigurationError(
                f"Autolink #{index + 1} in {config.file} must have key_prefix and url_template"
            )
        links.append(AutolinkSpec.model_validate(entry))
    return links
