"""
Pre-flight token validation.

Confirms the deployment credential can reach the target repository before
any workspace or clone exists, so a failure here has no side effects.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import SecretStr

from pagesync.core.deploy.errors import AuthError
from pagesync.core.github.client import GitHubClient, GitHubClientError
from pagesync.core.github.models import RepoAccess, RepoInfo

logger = logging.getLogger(__name__)


class TokenValidator:
    """Checks repository access through the GitHub repository API."""

    def __init__(
        self,
        client_factory: Callable[..., GitHubClient] = GitHubClient,
        **client_options: Any,
    ) -> None:
        """
        Args:
            client_factory: Builds a client from a token
            **client_options: Passed to the factory (api_url, timeout, transport)
        """
        self._client_factory = client_factory
        self._client_options = client_options

    def validate(self, repo: RepoInfo, token: SecretStr) -> RepoAccess:
        """
        Raise AuthError unless ``token`` can access and push to ``repo``.

        Returns:
            The repository metadata reported by the API.
        """
        logger.info("Validating token permissions for %s", repo.full_name)
        client = self._client_factory(token, **self._client_options)

        try:
            access = client.get_repository(repo)
        except GitHubClientError as e:
            raise AuthError(
                f"Token validation failed for {repo.full_name}. "
                "Ensure the token has 'repo' (contents: write) permissions",
                detail=str(e),
            ) from e

        if access.can_push is False:
            raise AuthError(
                f"Token can read {repo.full_name} but cannot push to it",
                detail="permissions.push is false",
            )

        logger.info("Token validation successful")
        return access
