"""
Change detection and the single deployment commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pagesync.core.deploy.errors import CommitError, GitError
from pagesync.core.deploy.git import GitRunner
from pagesync.core.deploy.models import CommitIdentity

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_TEMPLATE = "Deploy documentation from {revision}"


@dataclass(frozen=True)
class FileChange:
    """One entry of ``git status --porcelain``."""

    status: str
    path: str

    @classmethod
    def from_porcelain(cls, line: str) -> FileChange:
        # "XY path" or "XY old -> new" for renames
        return cls(status=line[:2].strip(), path=line[3:])


@dataclass(frozen=True)
class CommitResult:
    """The commit created for a deployment."""

    sha: str
    message: str
    changes: tuple[FileChange, ...]


def render_commit_message(template: str, revision: str) -> str:
    """Render the commit message; the only placeholder is ``{revision}``."""
    return template.replace("{revision}", revision)


class ChangeCommitter:
    """
    Stages everything and commits only when something changed.

    Example:
        >>> committer = ChangeCommitter(runner, CommitIdentity())
        >>> result = committer.commit_changes("Deploy documentation from abc123")
        >>> result is None  # nothing to deploy
        False
    """

    def __init__(self, runner: GitRunner, identity: CommitIdentity) -> None:
        self.runner = runner
        self.identity = identity

    def stage_all(self) -> None:
        result = self.runner.run(["add", "-A", "."])
        if not result.ok:
            raise CommitError("Failed to stage changes", detail=result.error_message)

    def detect_changes(self) -> list[FileChange]:
        """Porcelain status of the working tree after staging."""
        result = self.runner.run(["status", "--porcelain", "--untracked-files=all"])
        if not result.ok:
            raise CommitError("Failed to query working tree status", detail=result.error_message)
        return [FileChange.from_porcelain(line) for line in result.stdout.splitlines() if line]

    def commit_changes(self, message: str) -> CommitResult | None:
        """
        Stage all entries and commit once if anything differs.

        Returns:
            CommitResult, or None when there is nothing to commit.

        Raises:
            CommitError: If staging, status or commit fails, or the new HEAD cannot be resolved.
        """
        self.stage_all()
        changes = self.detect_changes()
        if not changes:
            logger.info("No changes to deploy")
            return None

        logger.info("Committing %d changed paths", len(changes))
        result = self.runner.run(
            ["commit", "--quiet", "--no-verify", "-m", message],
            config=self.identity.as_git_config(),
        )
        if not result.ok:
            raise CommitError("Failed to commit changes", detail=result.error_message)

        try:
            head = self.runner.run(["rev-parse", "HEAD"], check=True)
        except GitError as e:
            raise CommitError("Failed to resolve new commit", detail=e.stderr) from e

        return CommitResult(sha=head.stdout.strip(), message=message, changes=tuple(changes))
