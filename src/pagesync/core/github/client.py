"""
GitHub REST API client for pagesync.

Provides the single read-only call the deployment pipeline needs: fetching
the target repository with the deployment token to prove it has access.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from pagesync.core.github.models import RepoAccess, RepoInfo

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


class GitHubClientError(Exception):
    """Error from GitHub client operations."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """
    Minimal GitHub REST client authenticated with a bearer token.

    Example:
        >>> client = GitHubClient(SecretStr(token))
        >>> access = client.get_repository(RepoInfo(owner="user", repo="site"))
        >>> access.can_push
        True
    """

    def __init__(
        self,
        token: SecretStr,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize GitHubClient.

        Args:
            token: Bearer token; only unwrapped when building request headers
            api_url: REST API root (GitHub Enterprise hosts differ)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token.get_secret_value()}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def get_repository(self, repo: RepoInfo) -> RepoAccess:
        """
        Fetch repository metadata as the token's owner.

        Args:
            repo: Repository coordinates

        Returns:
            RepoAccess with the caller's permissions

        Raises:
            GitHubClientError: On HTTP errors, network errors, bad JSON or an
                unexpected response shape
        """
        path = f"/repos/{repo.owner}/{repo.repo}"
        logger.debug("GET %s%s", self.api_url, path)

        try:
            with httpx.Client(
                base_url=self.api_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.get(path, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise GitHubClientError(f"Request timed out after {self.timeout}s: {e}") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise GitHubClientError(
                f"HTTP {status_code} for {repo.full_name}",
                status_code=status_code,
            ) from e
        except httpx.RequestError as e:
            raise GitHubClientError(f"Network error: {e}") from e
        except ValueError as e:
            raise GitHubClientError(f"Invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise GitHubClientError("Unexpected response shape from repository API")

        try:
            return RepoAccess.from_api(data)
        except PydanticValidationError as e:
            raise GitHubClientError(
                f"Unexpected repository data for {repo.full_name}: {e}"
            ) from e
