"""
Shallow clone of the target repository into a workspace.

The clone itself uses the credential-free URL. The authenticated URL is
installed afterwards with ``git remote set-url`` so the token never appears
on the clone command line.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import SecretStr

from pagesync.core.deploy.errors import CloneError, FetchError
from pagesync.core.deploy.git import GitRunner

logger = logging.getLogger(__name__)

TOKEN_USER = "x-access-token"


def build_authenticated_url(url: str, token: SecretStr) -> SecretStr:
    """
    Embed a bearer token in an HTTP(S) remote URL.

    ``https://github.com/o/r.git`` becomes
    ``https://x-access-token:<token>@github.com/o/r.git``. Other schemes
    (local paths, file://, ssh) are returned unchanged.

    The result is a SecretStr and must only be unwrapped at the git call site.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not token.get_secret_value():
        return SecretStr(url)

    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{TOKEN_USER}:{token.get_secret_value()}@{host}"
    return SecretStr(urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment)))


class RepositoryCloner:
    """
    Clones a repository and installs the authenticated remote.

    Example:
        >>> cloner = RepositoryCloner(GitRunner(workspace.root, secrets=[token]))
        >>> repo_dir = cloner.clone(url, token, workspace.repo_dir)
    """

    def __init__(self, runner: GitRunner, *, remote_name: str = "origin", depth: int = 1) -> None:
        self.runner = runner
        self.remote_name = remote_name
        self.depth = depth

    def clone(self, url: str, token: SecretStr, destination: Path) -> Path:
        """
        Clone, authenticate and fetch.

        Args:
            url: Credential-free clone URL
            token: Credential to install in the remote URL
            destination: Directory to clone into (must not exist yet)

        Returns:
            The repository directory.

        Raises:
            CloneError: If the clone fails.
            FetchError: If installing the remote URL or fetching fails.
        """
        logger.info("Cloning repository %s", url)
        result = self.runner.run([
            "clone",
            f"--depth={self.depth}",
            "--no-single-branch",
            "--origin",
            self.remote_name,
            url,
            str(destination),
        ])
        if not result.ok:
            raise CloneError(f"Failed to clone {url}", detail=result.error_message)

        repo = self.runner.at(destination)
        self._install_credentials(repo, url, token)

        logger.info("Fetching all branches")
        result = repo.run(["fetch", self.remote_name])
        if not result.ok:
            raise FetchError(
                f"Failed to fetch from {self.remote_name}", detail=result.error_message
            )

        return destination

    def _install_credentials(self, repo: GitRunner, url: str, token: SecretStr) -> None:
        authenticated = build_authenticated_url(url, token)
        result = repo.run(
            ["remote", "set-url", self.remote_name, authenticated.get_secret_value()]
        )
        if not result.ok:
            raise FetchError(
                f"Failed to configure authenticated remote {self.remote_name}",
                detail=result.error_message,
            )
