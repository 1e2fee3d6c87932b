"""
Push of the publishing branch with a single forced fallback.

If the remote branch has diverged, a plain push is rejected. The publisher
then overwrites the remote branch once with ``--force``; concurrent
deployments are therefore settled by whichever push lands last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pagesync.core.deploy.errors import PublishError
from pagesync.core.deploy.git import GitResult, GitRunner

logger = logging.getLogger(__name__)

REJECTION_MARKERS = (
    "[rejected]",
    "non-fast-forward",
    "fetch first",
    "updates were rejected",
    "stale info",
)


def is_rejection(result: GitResult) -> bool:
    """Whether a failed push was refused because the remote moved on."""
    output = f"{result.stderr}\n{result.stdout}".lower()
    return any(marker in output for marker in REJECTION_MARKERS)


@dataclass(frozen=True)
class PublishResult:
    """How the branch reached the remote."""

    branch: str
    remote: str
    forced: bool


class Publisher:
    """
    Pushes the local branch to its remote counterpart.

    Example:
        >>> Publisher(runner, "gh-pages").publish().forced
        False
    """

    def __init__(self, runner: GitRunner, branch: str, *, remote_name: str = "origin") -> None:
        self.runner = runner
        self.branch = branch
        self.remote_name = remote_name

    @property
    def refspec(self) -> str:
        return f"refs/heads/{self.branch}:refs/heads/{self.branch}"

    def _push(self, force: bool = False) -> GitResult:
        args = ["push"]
        if force:
            args.append("--force")
        args.extend([self.remote_name, self.refspec])
        return self.runner.run(args)

    def publish(self) -> PublishResult:
        """
        Push, retrying once with force if the plain push is rejected.

        Raises:
            PublishError: If the push fails for another reason, or the forced
                retry fails too.
        """
        logger.info("Pushing to %s branch", self.branch)
        result = self._push()
        if result.ok:
            return PublishResult(branch=self.branch, remote=self.remote_name, forced=False)

        if not is_rejection(result):
            raise PublishError(f"Failed to push {self.branch}", detail=result.error_message)

        logger.warning("Regular push failed, attempting force push: %s", result.error_message)
        forced = self._push(force=True)
        if not forced.ok:
            raise PublishError(
                f"Force push of {self.branch} failed",
                detail=forced.error_message,
            )

        logger.info("Force push successful")
        return PublishResult(branch=self.branch, remote=self.remote_name, forced=True)
