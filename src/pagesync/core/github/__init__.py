"""
GitHub integration for pagesync.

Provides repository coordinates and the REST client used to validate
deployment tokens.
"""

from pagesync.core.github.client import GitHubClient, GitHubClientError
from pagesync.core.github.models import RepoAccess, RepoInfo, RepoPermissions

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "RepoAccess",
    "RepoInfo",
    "RepoPermissions",
]
