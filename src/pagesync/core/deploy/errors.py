"""
Exception hierarchy for the deployment pipeline.

Each pipeline stage raises its own subclass of DeployError. The ``stage``
attribute names the step that failed so DeployService can report a single
consolidated failure to the caller.
"""

from __future__ import annotations


class DeployError(Exception):
    """Base exception for deployment failures."""

    stage = "deploy"

    def __init__(self, message: str, *, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail

    def describe(self) -> str:
        """Message plus detail (e.g. git stderr), if any."""
        message = str(self)
        if self.detail:
            return f"{message}: {self.detail}"
        return message


class ValidationError(DeployError):
    """The deployment request is unusable (missing artifact tree, bad input)."""

    stage = "validate"


class AuthError(DeployError):
    """The credential cannot access the target repository."""

    stage = "auth"


class CloneError(DeployError):
    """Cloning the target repository failed."""

    stage = "clone"


class WorkspaceError(DeployError):
    """The ephemeral workspace could not be created."""

    stage = "workspace"


class FetchError(DeployError):
    """Configuring the authenticated remote or fetching from it failed."""

    stage = "fetch"


class BranchReconciliationError(DeployError):
    """Every branch reconciliation path (local, remote, orphan) failed."""

    stage = "reconcile"


class SyncError(DeployError):
    """Replacing the workspace content with the artifact tree failed."""

    stage = "sync"

    def __init__(self, message: str, *, detail: str = "", paths: list[str] | None = None) -> None:
        super().__init__(message, detail=detail)
        self.paths = paths or []


class CommitError(DeployError):
    """Staging, status inspection or committing failed."""

    stage = "commit"


class PublishError(DeployError):
    """Pushing failed, including the single forced retry."""

    stage = "publish"


class CleanupError(DeployError):
    """Removing the workspace failed. Never fatal, only logged."""

    stage = "cleanup"


class GitError(Exception):
    """Exception raised when a git operation fails."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr
