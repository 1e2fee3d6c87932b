"""Utility modules for pagesync."""

from .git import get_current_commit, get_remote_url, is_valid_branch_name, resolve_revision

__all__ = [
    "get_current_commit",
    "get_remote_url",
    "is_valid_branch_name",
    "resolve_revision",
]
