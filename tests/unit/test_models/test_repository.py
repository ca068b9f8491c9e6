"""Tests for repository identifiers and desired-state specs."""

import pytest
from pydantic import ValidationError

from bulkrepo.errors import InvalidRepositoryError
from bulkrepo.models.repository import AutolinkSpec, RepositoryIdentifier, RulesetSpec


class TestRepositoryIdentifier:
    """Test owner/name parsing."""

    def test_parses_owner_and_name(self) -> None:
        repo = RepositoryIdentifier.parse("octo/hello-world")

        assert repo.owner == "octo"
        assert repo.name == "hello-world"
        assert str(repo) == "octo/hello-world"

    def test_strips_whitespace(self) -> None:
        assert RepositoryIdentifier.parse("  octo/hello ").full_name == "octo/hello"

    @pytest.mark.parametrize("value", ["hello", "octo/", "/hello", "a/b/c", ""])
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(InvalidRepositoryError):
            RepositoryIdentifier.parse(value)


class TestRulesetSpec:
    """Test RulesetSpec validation and payload."""

    def test_requires_name(self) -> None:
        with pytest.raises(ValidationError):
            RulesetSpec.model_validate({"rules": []})

    def test_payload_omits_unset_optionals(self) -> None:
        spec = RulesetSpec(name="main-protection", rules=[{"type": "deletion"}])

        payload = spec.to_payload()

        assert payload == {
            "name": "main-protection",
            "target": "branch",
            "enforcement": "active",
            "rules": [{"type": "deletion"}],
        }

    def test_ignores_api_only_fields(self) -> None:
        spec = RulesetSpec.model_validate({"name": "x", "id": 7, "node_id": "abc"})
        assert "id" not in spec.to_payload()


class TestAutolinkSpec:
    """Test AutolinkSpec matching."""

    def test_matches_identical(self) -> None:
        spec = AutolinkSpec(key_prefix="JIRA-", url_template="https://jira/browse/JIRA-<num>")
        existing = {
            "id": 1,
            "key_prefix": "JIRA-",
            "url_template": "https://jira/browse/JIRA-<num>",
            "is_alphanumeric": True,
        }
        assert spec.matches(existing)

    def test_differs_on_template_or_flag(self) -> None:
        spec = AutolinkSpec(key_prefix="T-", url_template="https://t/<num>", is_alphanumeric=False)

        assert not spec.matches(
            {"key_prefix": "T-", "url_template": "https://other/<num>", "is_alphanumeric": False}
        )
        assert not spec.matches(
            {"key_prefix": "T-", "url_template": "https://t/<num>", "is_alphanumeric": True}
        )
