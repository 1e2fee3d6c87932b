"""
GitHub data models for pagesync.

Defines Pydantic models for repository coordinates and the subset of the
repository API response used for token validation.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, computed_field

_NAME_PATTERN = r"[A-Za-z0-9_.-]+"


class RepoInfo(BaseModel):
    """
    GitHub repository coordinates.

    Parsed from an ``owner/name`` slug or from the ``origin`` URL of a local
    checkout.

    Example:
        >>> RepoInfo.from_slug("user/site").full_name
        'user/site'
        >>> RepoInfo.from_remote_url("git@github.com:user/site.git").full_name
        'user/site'
    """

    owner: str = Field(..., min_length=1, description="Repository owner (user or organization)")
    repo: str = Field(..., min_length=1, description="Repository name")

    @computed_field
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    def clone_url(self, host: str = "github.com") -> str:
        """Credential-free HTTPS clone URL on the given host."""
        return f"https://{host}/{self.owner}/{self.repo}.git"

    @classmethod
    def from_slug(cls, slug: str) -> RepoInfo | None:
        """
        Parse an ``owner/name`` slug, as found in ``GITHUB_REPOSITORY``.

        Returns:
            RepoInfo or None if the slug is malformed
        """
        match = re.fullmatch(rf"\s*({_NAME_PATTERN})/({_NAME_PATTERN})\s*", slug or "")
        if not match:
            return None
        return cls(owner=match.group(1), repo=match.group(2))

    @classmethod
    def from_remote_url(cls, remote_url: str | None, host: str = "github.com") -> RepoInfo | None:
        """
        Parse the coordinates out of a remote URL on ``host``.

        Accepts scp-style SSH (``git@host:owner/name.git``), ``ssh://`` and
        HTTP(S) URLs, with or without credentials and the ``.git`` suffix.

        Returns:
            RepoInfo, or None for other hosts and local paths
        """
        host_pattern = re.escape(host)
        ssh = rf"(?:ssh://)?git@{host_pattern}[:/]"
        https = rf"https?://(?:[^@/]+@)?{host_pattern}/"
        prefix = f"(?:{ssh}|{https})"
        match = re.fullmatch(
            rf"{prefix}({_NAME_PATTERN})/({_NAME_PATTERN}?)(?:\.git)?/?",
            (remote_url or "").strip(),
        )
        if not match:
            return None
        return cls(owner=match.group(1), repo=match.group(2))


class RepoPermissions(BaseModel):
    """Permission flags GitHub reports for the authenticated caller."""

    admin: bool = False
    push: bool = False
    pull: bool = False


class RepoAccess(BaseModel):
    """
    Repository as returned by ``GET /repos/{owner}/{repo}``.

    Only the fields needed to decide whether a deployment may proceed.
    """

    full_name: str = Field(default="", description="owner/name as reported by the API")
    default_branch: str = Field(default="main", description="Repository default branch")
    private: bool = Field(default=False, description="Whether the repository is private")
    permissions: RepoPermissions | None = Field(
        default=None,
        description="Caller permissions (absent for unauthenticated responses)",
    )

    @classmethod
    def from_api(cls, data: dict[str, object]) -> RepoAccess:
        """Build from a decoded API response, ignoring unknown fields."""
        permissions = data.get("permissions")
        return cls(
            full_name=str(data.get("full_name") or ""),
            default_branch=str(data.get("default_branch") or "main"),
            private=bool(data.get("private", False)),
            permissions=(
                RepoPermissions.model_validate(permissions)
                if isinstance(permissions, dict)
                else None
            ),
        )

    @property
    def can_push(self) -> bool | None:
        """True/False when permissions are reported, None when unknown."""
        if self.permissions is None:
            return None
        return self.permissions.push or self.permissions.admin
