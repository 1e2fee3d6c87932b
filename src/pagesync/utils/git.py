"""
Git utilities for pagesync.

Helpers that inspect the repository the deployment is triggered from,
rather than the ephemeral clone the pipeline works in.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

_INVALID_REF_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def is_valid_branch_name(name: str) -> bool:
    """Check a branch name against git's ref naming rules.

    Follows ``git check-ref-format --branch`` closely enough to reject names
    that would break checkout or push.

    Example:
        >>> is_valid_branch_name("gh-pages")
        True
        >>> is_valid_branch_name("bad..name")
        False
    """
    if not name or name == "@":
        return False
    if _INVALID_REF_CHARS.search(name):
        return False
    if name.startswith(("-", "/")) or name.endswith(("/", ".", ".lock")):
        return False
    if ".." in name or "@{" in name or "//" in name:
        return False
    return not any(part.startswith(".") for part in name.split("/"))


def get_current_commit(path: Path | None = None) -> str | None:
    """Get the HEAD commit hash of the repository containing ``path``.

    Args:
        path: Any directory inside the repository (defaults to cwd)

    Returns:
        Full commit hash, or None if not in a git repo or HEAD is unborn
    """
    try:
        repo = Repo(path or Path.cwd(), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None

    try:
        return repo.head.commit.hexsha
    except ValueError:
        # Unborn HEAD (repository without commits)
        return None


def resolve_revision(explicit: str | None = None, path: Path | None = None) -> str | None:
    """Pick the revision identifier for a deployment commit message.

    Precedence: explicit value, then GITHUB_SHA, then the local HEAD commit.
    """
    if explicit and explicit.strip():
        return explicit.strip()
    if sha := os.environ.get("GITHUB_SHA", "").strip():
        return sha
    return get_current_commit(path)


def get_remote_url(name: str = "origin", path: Path | None = None) -> str | None:
    """Get the URL of remote ``name`` in the repository containing ``path``.

    Returns:
        The configured URL, or None outside a repository or without that remote
    """
    try:
        repo = Repo(path or Path.cwd(), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None

    if name not in repo.remotes:
        return None
    return repo.remotes[name].url
