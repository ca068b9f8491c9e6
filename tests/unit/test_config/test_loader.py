"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from bulkrepo.config.loader import load_autolinks, load_config, load_ruleset
from bulkrepo.config.models import AutolinksConfig
from bulkrepo.errors import ConfigurationError


class TestLoadConfig:
    """Test load_config."""

    def test_none_returns_defaults(self) -> None:
        config = load_config(None)
        assert config.settings.touched() == {}

    def test_loads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bulkrepo.yaml"
        path.write_text(
            "settings:\n"
            "  allow_squash_merge: true\n"
            "  allow_merge_commit: false\n"
            "topics: [python, tooling]\n"
            "dry_run: true\n"
        )

        config = load_config(path)

        assert config.settings.allow_squash_merge is True
        assert config.settings.allow_merge_commit is False
        assert config.topics == ["python", "tooling"]
        assert config.dry_run is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("settings: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).dry_run is False


class TestLoadRuleset:
    """Test load_ruleset."""

    def test_loads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "ruleset.json"
        path.write_text(json.dumps({"name": "main", "rules": [{"type": "deletion"}]}))

        spec = load_ruleset(path)

        assert spec.name == "main"
        assert spec.rules == [{"type": "deletion"}]

    def test_missing_name(self, tmp_path: Path) -> None:
        path = tmp_path / "ruleset.json"
        path.write_text(json.dumps({"rules": []}))

        with pytest.raises(ConfigurationError, match='"name"'):
            load_ruleset(path)

    def test_unparseable(self, tmp_path: Path) -> None:
        path = tmp_path / "ruleset.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_ruleset(path)

    def test_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Failed to read"):
            load_ruleset(tmp_path / "nope.json")


class TestLoadAutolinks:
    """Test load_autolinks."""

    def test_inline_links(self) -> None:
        config = AutolinksConfig.model_validate(
            {"links": [{"key_prefix": "T-", "url_template": "https://t/<num>"}]}
        )
        assert [link.key_prefix for link in load_autolinks(config)] == ["T-"]

    def test_file_with_autolinks_key(self, tmp_path: Path) -> None:
        path = tmp_path / "autolinks.yml"
        path.write_text(
            "autolinks:\n"
            "  - key_prefix: JIRA-\n"
            "    url_template: https://jira/browse/JIRA-<num>\n"
            "    is_alphanumeric: false\n"
        )

        links = load_autolinks(AutolinksConfig(file=path))

        assert len(links) == 1
        assert links[0].is_alphanumeric is False

    def test_entry_missing_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "autolinks.yml"
        path.write_text("autolinks:\n  - key_prefix: JIRA-\n")

        with pytest.raises(ConfigurationError, match="key_prefix and url_template"):
            load_autolinks(AutolinksConfig(file=path))

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = tmp_path / "autolinks.yml"
        path.write_text("autolinks: nope\n")

        with pytest.raises(ConfigurationError, match='"autolinks" array'):
            load_autolinks(AutolinksConfig(file=path))
