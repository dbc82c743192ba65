"""
GitHub API Client

Thin async wrapper over the two GitHub REST endpoints the bridge needs:
the authenticated user (identity lookup) and the Copilot request-signing
public keys.
"""

import logging

import httpx

from quackbridge.github.models import CopilotPublicKey, GitHubUser

logger = logging.getLogger(__name__)

COPILOT_PUBLIC_KEYS_PATH = "/meta/public_keys/copilot_api"


class GitHubAPIError(Exception):
    """GitHub API request failed or returned an unexpected body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """
    Async GitHub REST client.

    Usage:
        client = GitHubClient()
        user = await client.get_authenticated_user(token)
        print(user.login)
        await client.close()
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=float(timeout))

    async def get_authenticated_user(self, token: str) -> GitHubUser:
        """
        Resolve the account behind a user-to-server token.

        Raises:
            GitHubAPIError: On HTTP or transport failure
        """
        data = await self._get("/user", token)
        user = GitHubUser.model_validate(data)
        logger.debug("Resolved GitHub user", extra={"login": user.login})
        return user

    async def get_copilot_public_keys(self, token: str | None = None) -> list[CopilotPublicKey]:
        """Fetch the keys GitHub uses to sign Copilot agent requests."""
        data = await self._get(COPILOT_PUBLIC_KEYS_PATH, token)
        try:
            return [CopilotPublicKey.model_validate(key) for key in data["public_keys"]]
        except (KeyError, TypeError) as e:
            raise GitHubAPIError(f"Malformed public key response: {e}") from e

    async def close(self) -> None:
        await self.client.aclose()

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "quackbridge",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get(self, path: str, token: str | None):
        url = f"{self.api_url}{path}"
        try:
            response = await self.client.get(url, headers=self._headers(token))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"GitHub API error for {path}: {e.response.status_code}")
            raise GitHubAPIError(
                f"GitHub API request to {path} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"GitHub API transport error for {path}: {e}")
            raise GitHubAPIError(f"GitHub API request to {path} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"GitHub API returned a non-JSON body for {path}")
            raise GitHubAPIError(
                f"Malformed response from {path}: {e}",
                status_code=response.status_code,
            ) from e
