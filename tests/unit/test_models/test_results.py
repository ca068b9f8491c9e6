"""Tests for result models."""

from bulkrepo.models.results import (
    AutolinkResult,
    AutolinkStatus,
    ChangeRecord,
    FileSyncResult,
    FileSyncStatus,
    RepositoryResult,
    RulesetResult,
    RulesetStatus,
    SettingsResult,
    ToggleResult,
    ToggleStatus,
)


class TestChangeRecord:
    """Test ChangeRecord aliases."""

    def test_dumps_from_and_to(self) -> None:
        change = ChangeRecord(field="allow_squash_merge", from_value=False, to_value=True)

        assert change.model_dump(by_alias=True) == {
            "field": "allow_squash_merge",
            "from": False,
            "to": True,
        }
        assert str(change) == "allow_squash_merge: False -> True"


class TestSettingsResult:
    """Test SettingsResult.changed."""

    def test_unchanged_by_default(self) -> None:
        assert not SettingsResult(repository="o/r").changed

    def test_changed_by_toggle(self) -> None:
        result = SettingsResult(repository="o/r")
        result.toggles["secret_scanning"] = ToggleResult(
            current=False, desired=True, status=ToggleStatus.WOULD_ENABLE
        )
        assert result.changed

    def test_unchanged_toggle_is_not_a_change(self) -> None:
        result = SettingsResult(repository="o/r")
        result.toggles["secret_scanning"] = ToggleResult(
            current=True, desired=True, status=ToggleStatus.UNCHANGED
        )
        assert not result.changed


class TestRepositoryResult:
    """Test aggregation across resources."""

    def test_success_when_no_resources(self) -> None:
        assert RepositoryResult(repository="o/r").success

    def test_one_failed_resource_fails_repository(self) -> None:
        result = RepositoryResult(
            repository="o/r",
            settings=SettingsResult(repository="o/r"),
            ruleset=RulesetResult(success=False, error="boom"),
        )

        assert not result.success
        assert result.errors == ["ruleset: boom"]

    def test_errors_are_namespaced_by_file_key(self) -> None:
        result = RepositoryResult(repository="o/r")
        result.files["gitignore"] = FileSyncResult(success=False, error="nope")
        result.files["dependabot"] = FileSyncResult(status=FileSyncStatus.UNCHANGED)

        assert result.errors == ["gitignore: nope"]

    def test_changed(self) -> None:
        result = RepositoryResult(repository="o/r")
        result.files["dependabot"] = FileSyncResult(status=FileSyncStatus.PR_UP_TO_DATE)
        result.autolinks = AutolinkResult(status=AutolinkStatus.UNCHANGED)
        assert not result.changed

        result.ruleset = RulesetResult(status=RulesetStatus.UNCHANGED, would_delete=["legacy"])
        assert result.changed

    def test_success_is_serialized(self) -> None:
        data = RepositoryResult(repository="o/r").model_dump()
        assert data["success"] is True
