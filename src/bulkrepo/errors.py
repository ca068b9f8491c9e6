"""bulkrepo error types.

All custom exceptions inherit from BulkRepoError to allow
catching any bulkrepo-specific error.
"""


class BulkRepoError(Exception):
    """Base exception for all bulkrepo errors."""

    pass


class ConfigurationError(BulkRepoError):
    """Invalid configuration."""

    pass


class InvalidRepositoryError(BulkRepoError):
    """Repository identifier is not in owner/repo form."""

    def __init__(self, value: str) -> None:
        super().__init__('Invalid repository format. Expected "owner/repo"')
        self.value = value


class GitHubAPIError(BulkRepoError):
    """GitHub API returned a non-success response."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def forbidden(self) -> bool:
        return self.status_code == 403


class SourceFileError(BulkRepoError):
    """A local source file for a file sync could not be read."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class PackageJsonError(BulkRepoError):
    """Target package.json is missing or not valid JSON."""

    pass


class MissingTargetFileError(BulkRepoError):
    """A file that must already exist in the repository is absent."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path
