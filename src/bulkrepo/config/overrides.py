"""Per-repository overrides of the global desired state.

Override keys mirror the global setting names (``allow-squash-merge``,
``topics``, ``dependabot-yml`` ...). Dashed and underscored spellings
are equivalent.
"""

from difflib import get_close_matches
from typing import Any

from loguru import logger
from pydantic import ValidationError

from bulkrepo.config.models import SETTINGS_FIELDS, DesiredState
from bulkrepo.errors import ConfigurationError

# Override key -> dotted path into DesiredState
OVERRIDE_PATHS: dict[str, str] = {
    **{name.replace("_", "-"): f"settings.{name}" for name in SETTINGS_FIELDS},
    "enable-default-code-scanning": "security.enable_code_scanning",
    "enable-code-scanning": "security.enable_code_scanning",
    "immutable-releases": "security.immutable_releases",
    "secret-scanning": "security.secret_scanning",
    "secret-scanning-push-protection": "security.secret_scanning_push_protection",
    "dependabot-alerts": "security.dependabot_alerts",
    "dependabot-security-updates": "security.dependabot_security_updates",
    "topics": "topics",
    "dependabot-yml": "dependabot.source",
    "gitignore": "gitignore.source",
    "pull-request-template": "pull_request_template.source",
    "workflow-files": "workflows.sources",
    "workflow-targets": "workflows.targets",
    "package-json-file": "package_json.source",
    "package-json-fields": "package_json.merge_fields",
    "rulesets-file": "ruleset.file",
    "delete-unmanaged-rulesets": "ruleset.delete_unmanaged",
    "autolinks-file": "autolinks.file",
}


def _normalize(key: str) -> str:
    return key.strip().lower().replace("_", "-")


class KnownKeys:
    """
    Lookup table of accepted override keys.

    Built explicitly and handed to the validator; call ``invalidate``
    after changing ``paths`` to rebuild the normalized index.
    """

    def __init__(self, paths: dict[str, str] | None = None) -> None:
        self.paths = dict(OVERRIDE_PATHS if paths is None else paths)
        self._index: dict[str, str] | None = None

    def invalidate(self) -> None:
        self._index = None

    @property
    def index(self) -> dict[str, str]:
        if self._index is None:
            self._index = {_normalize(k): v for k, v in self.paths.items()}
        return self._index

    def path_for(self, key: str) -> str | None:
        return self.index.get(_normalize(key))

    def suggest(self, key: str) -> str | None:
        matches = get_close_matches(_normalize(key), list(self.index), n=1, cutoff=0.6)
        return matches[0] if matches else None


def unknown_keys(overrides: dict[str, Any], known: KnownKeys) -> list[str]:
    """Return override keys that map to nothing, warning with a suggestion for each."""
    unknown = []
    for key in overrides:
        if known.path_for(key) is not None:
            continue
        unknown.append(key)
        suggestion = known.suggest(key)
        if suggestion:
            logger.warning("Unknown override key '{}' (did you mean '{}'?)", key, suggestion)
        else:
            logger.warning("Unknown override key '{}' is ignored", key)
    return unknown


def apply_overrides(
    desired: DesiredState, overrides: dict[str, Any], known: KnownKeys
) -> DesiredState:
    """
    Return a new DesiredState with per-repository overrides applied.

    Unknown keys are warned about and ignored. The global state is not
    modified.

    Raises:
        ConfigurationError: If an override value fails validation.
    """
    if not overrides:
        return desired

    data = desired.model_dump(by_alias=True)
    unknown_keys(overrides, known)
    for key, value in overrides.items():
        path = known.path_for(key)
        if path is None:
            continue
        *parents, leaf = path.split(".")
        target = data
        for part in parents:
            target = target[part]
        target[leaf] = value

    try:
        return DesiredState.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid repository override: {e}") from e
