"""Tests for bulkrepo error types."""

from bulkrepo.errors import (
    BulkRepoError,
    ConfigurationError,
    GitHubAPIError,
    InvalidRepositoryError,
    MissingTargetFileError,
    PackageJsonError,
    SourceFileError,
)


class TestErrorHierarchy:
    """Test error class hierarchy."""

    def test_all_errors_inherit_from_bulkrepo_error(self) -> None:
        """All custom errors should inherit from BulkRepoError."""
        assert issubclass(ConfigurationError, BulkRepoError)
        assert issubclass(GitHubAPIError, BulkRepoError)
        assert issubclass(InvalidRepositoryError, BulkRepoError)
        assert issubclass(SourceFileError, BulkRepoError)
        assert issubclass(PackageJsonError, BulkRepoError)
        assert issubclass(MissingTargetFileError, BulkRepoError)

    def test_bulkrepo_error_inherits_from_exception(self) -> None:
        """BulkRepoError should inherit from Exception."""
        assert issubclass(BulkRepoError, Exception)


class TestGitHubAPIError:
    """Test GitHubAPIError specifics."""

    def test_carries_status_and_url(self) -> None:
        error = GitHubAPIError("Not Found", status_code=404, url="/repos/o/r")

        assert str(error) == "Not Found"
        assert error.status_code == 404
        assert error.url == "/repos/o/r"

    def test_not_found_and_forbidden_helpers(self) -> None:
        assert GitHubAPIError("x", status_code=404).not_found
        assert not GitHubAPIError("x", status_code=404).forbidden
        assert GitHubAPIError("x", status_code=403).forbidden
        assert not GitHubAPIError("x").not_found


class TestInvalidRepositoryError:
    """Test InvalidRepositoryError specifics."""

    def test_message_and_value(self) -> None:
        error = InvalidRepositoryError("just-a-name")

        assert "Expected \"owner/repo\"" in str(error)
        assert error.value == "just-a-name"


class TestSourceFileError:
    """Test SourceFileError specifics."""

    def test_keeps_path(self) -> None:
        error = SourceFileError("cannot read", path="files/dependabot.yml")
        assert error.path == "files/dependabot.yml"
