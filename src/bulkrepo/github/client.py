"""GitHub REST API client.

Thin async wrapper over httpx implementing every call the reconcilers
need. Non-2xx responses raise GitHubAPIError carrying the status code;
nothing is retried.
"""

from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from bulkrepo.config.models import GitHubConfig
from bulkrepo.errors import GitHubAPIError

GITHUB_API_VERSION = "2022-11-28"
PER_PAGE = 100


class GitHubClient:
    """
    Async GitHub REST client.

    Use as an async context manager so the underlying connection
    pool is closed::

        async with GitHubClient(config.github) as gh:
            repo = await gh.get_repository("octo", "hello")
    """

    def __init__(
        self, config: GitHubConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": config.user_agent,
            },
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self, method: str, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        """
        Perform an authenticated request.

        Returns:
            Decoded JSON body, or None for empty (204) responses.

        Raises:
            GitHubAPIError: For any non-2xx response or transport failure.
        """
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"{method} {path} failed: {e}", url=path) from e

        if response.is_error:
            message = response.reason_phrase
            try:
                body = response.json()
                message = body.get("message", message)
            except ValueError:
                pass
            logger.debug("{} {} -> {} {}", method, path, response.status_code, message)
            raise GitHubAPIError(message, status_code=response.status_code, url=path)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _paginate(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        items: list[Any] = []
        page = 1
        while True:
            data = await self.request(
                "GET", path, params={**(params or {}), "per_page": PER_PAGE, "page": page}
            )
            if not data:
                return items
            items.extend(data)
            page += 1

    # Repository record and topics

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self.request("GET", f"/repos/{owner}/{repo}")

    async def update_repository(self, owner: str, repo: str, **fields: Any) -> dict[str, Any]:
        return await self.request("PATCH", f"/repos/{owner}/{repo}", json=fields)

    async def get_all_topics(self, owner: str, repo: str) -> list[str]:
        data = await self.request("GET", f"/repos/{owner}/{repo}/topics")
        return list(data.get("names", []))

    async def replace_all_topics(self, owner: str, repo: str, names: list[str]) -> list[str]:
        data = await self.request("PUT", f"/repos/{owner}/{repo}/topics", json={"names": names})
        return list(data.get("names", []))

    # Code scanning

    async def get_code_scanning_default_setup(self, owner: str, repo: str) -> dict[str, Any]:
        return await self.request("GET", f"/repos/{owner}/{repo}/code-scanning/default-setup")

    async def update_code_scanning_default_setup(
        self, owner: str, repo: str, state: str, query_suite: str
    ) -> dict[str, Any]:
        return await self.request(
            "PATCH",
            f"/repos/{owner}/{repo}/code-scanning/default-setup",
            json={"state": state, "query_suite": query_suite},
        )

    # Git data

    async def get_ref(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        return await self.request("GET", f"/repos/{owner}/{repo}/git/ref/{ref}")

    async def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> dict[str, Any]:
        return await self.request(
            "POST", f"/repos/{owner}/{repo}/git/refs", json={"ref": ref, "sha": sha}
        )

    async def update_ref(
        self, owner: str, repo: str, ref: str, sha: str, force: bool = False
    ) -> dict[str, Any]:
        return await self.request(
            "PATCH", f"/repos/{owner}/{repo}/git/refs/{ref}", json={"sha": sha, "force": force}
        )

    async def get_content(self, owner: str, repo: str, path: str, ref: str) -> dict[str, Any]:
        return await self.request(
            "GET", f"/repos/{owner}/{repo}/contents/{quote(path)}", params={"ref": ref}
        )

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
        payload: dict[str, Any] = {"message": message, "content": content, "branch": branch}
        if sha:
            payload["sha"] = sha
        return await self.request(
            "PUT", f"/repos/{owner}/{repo}/contents/{quote(path)}", json=payload
        )

    # Pull requests

    async def list_pulls(
        self, owner: str, repo: str, state: str = "open", head: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"state": state}
        if head:
            params["head"] = head
        return await self.request("GET", f"/repos/{owner}/{repo}/pulls", params=params)

    async def create_pull(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> dict[str, Any]:
        return await self.request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )

    # Rulesets

    async def list_rulesets(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self._paginate(
            f"/repos/{owner}/{repo}/rulesets", params={"includes_parents": "false"}
        )

    async def get_ruleset(self, owner: str, repo: str, ruleset_id: int) -> dict[str, Any]:
        return await self.request("GET", f"/repos/{owner}/{repo}/rulesets/{ruleset_id}")

    async def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", f"/repos/{owner}/{repo}/rulesets", json=ruleset)

    async def update_ruleset(
        self, owner: str, repo: str, ruleset_id: int, ruleset: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.request(
            "PUT", f"/repos/{owner}/{repo}/rulesets/{ruleset_id}", json=ruleset
        )

    async def delete_ruleset(self, owner: str, repo: str, ruleset_id: int) -> None:
        await self.request("DELETE", f"/repos/{owner}/{repo}/rulesets/{ruleset_id}")

    # Autolinks

    async def list_autolinks(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self.request("GET", f"/repos/{owner}/{repo}/autolinks") or []

    async def create_autolink(
        self, owner: str, repo: str, key_prefix: str, url_template: str, is_alphanumeric: bool
    ) -> dict[str, Any]:
        return await self.request(
            "POST",
            f"/repos/{owner}/{repo}/autolinks",
            json={
                "key_prefix": key_prefix,
                "url_template": url_template,
                "is_alphanumeric": is_alphanumeric,
            },
        )

    async def delete_autolink(self, owner: str, repo: str, autolink_id: int) -> None:
        await self.request("DELETE", f"/repos/{owner}/{repo}/autolinks/{autolink_id}")

    # Owners

    async def org_exists(self, org: str) -> bool:
        try:
            await self.request("GET", f"/orgs/{org}")
        except GitHubAPIError as e:
            if e.status_code in (403, 404):
                return False
            raise
        return True

    async def list_org_repos(self, org: str) -> list[dict[str, Any]]:
        return await self._paginate(f"/orgs/{org}/repos", params={"type": "all"})

    async def list_user_repos(self, username: str) -> list[dict[str, Any]]:
        return await self._paginate(f"/users/{username}/repos", params={"type": "all"})
