"""Port interface for the repository hosting API."""

from typing import Any, Protocol


class RepositoryPort(Protocol):
    """Protocol for repository records and topics."""

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Get repository record including permissions and security_and_analysis."""
        ...

    async def update_repository(self, owner: str, repo: str, **fields: Any) -> dict[str, Any]:
        """Update a partial set of repository fields."""
        ...

    async def get_all_topics(self, owner: str, repo: str) -> list[str]:
        """Get repository topics."""
        ...

    async def replace_all_topics(self, owner: str, repo: str, names: list[str]) -> list[str]:
        """Replace every repository topic."""
        ...


class SecurityPort(Protocol):
    """Protocol for code scanning and generic security endpoints."""

    async def get_code_scanning_default_setup(self, owner: str, repo: str) -> dict[str, Any]:
        """Get code scanning default setup."""
        ...

    async def update_code_scanning_default_setup(
        self, owner: str, repo: str, state: str, query_suite: str
    ) -> dict[str, Any]:
        """Update code scanning default setup."""
        ...

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """Authenticated request for endpoints without a typed helper."""
        ...


class GitPort(Protocol):
    """Protocol for refs, contents and pull requests."""

    async def get_ref(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        """Get a git ref such as ``heads/main``."""
        ...

    async def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> dict[str, Any]:
        """Create a fully qualified ref such as ``refs/heads/x``."""
        ...

    async def update_ref(
        self, owner: str, repo: str, ref: str, sha: str, force: bool = False
    ) -> dict[str, Any]:
        """Move a ref such as ``heads/x``."""
        ...

    async def get_content(self, owner: str, repo: str, path: str, ref: str) -> dict[str, Any]:
        """Get file content (base64) and blob sha at a ref."""
        ...

    async def create_or_update_file_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: str,
        branch: str,
        sha: str | None = None,
    ) -> dict[str, Any]:
        """Commit base64 content to a branch."""
        ...

    async def list_pulls(
        self, owner: str, repo: str, state: str = "open", head: str | None = None
    ) -> list[dict[str, Any]]:
        """List pull requests."""
        ...

    async def create_pull(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> dict[str, Any]:
        """Open a pull request."""
        ...


class RulesetPort(Protocol):
    """Protocol for repository rulesets."""

    async def list_rulesets(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List repository rulesets (summary form)."""
        ...

    async def get_ruleset(self, owner: str, repo: str, ruleset_id: int) -> dict[str, Any]:
        """Get full ruleset detail."""
        ...

    async def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]:
        """Create a ruleset."""
        ...

    async def update_ruleset(
        self, owner: str, repo: str, ruleset_id: int, ruleset: dict[str, Any]
    ) -> dict[str, Any]:
        """Replace a ruleset with the posted document."""
        ...

    async def delete_ruleset(self, owner: str, repo: str, ruleset_id: int) -> None:
        """Delete a ruleset."""
        ...


class AutolinkPort(Protocol):
    """Protocol for repository autolinks."""

    async def list_autolinks(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List autolinks."""
        ...

    async def create_autolink(
        self, owner: str, repo: str, key_prefix: str, url_template: str, is_alphanumeric: bool
    ) -> dict[str, Any]:
        """Create an autolink."""
        ...

    async def delete_autolink(self, owner: str, repo: str, autolink_id: int) -> None:
        """Delete an autolink."""
        ...


class OwnerPort(Protocol):
    """Protocol for listing repositories of an owner."""

    async def org_exists(self, org: str) -> bool:
        """Probe whether an organization is visible."""
        ...

    async def list_org_repos(self, org: str) -> list[dict[str, Any]]:
        """List every repository of an organization."""
        ...

    async def list_user_repos(self, username: str) -> list[dict[str, Any]]:
        """List every repository of a user."""
        ...


class GitHubPort(
    RepositoryPort, SecurityPort, GitPort, RulesetPort, AutolinkPort, OwnerPort, Protocol
):
    """Full repository hosting client capability."""

    pass
