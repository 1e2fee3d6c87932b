"""
Deployment of built artifact trees to a publishing branch.

Clones the target repository into an ephemeral workspace, brings it onto the
publishing branch (existing, tracked from the remote, or a new orphan),
replaces its content with the artifact tree and commits/pushes the result,
force-pushing once if the remote branch has diverged.

Example:
    >>> from pagesync.core.deploy import DeployService, DeploymentRequest
    >>> result = DeployService().deploy(request)
    >>> if result.outcome is DeployOutcome.NO_CHANGES:
    ...     print("Nothing to deploy")
"""

from pagesync.core.deploy.errors import (
    AuthError,
    BranchReconciliationError,
    CleanupError,
    CloneError,
    CommitError,
    DeployError,
    FetchError,
    GitError,
    PublishError,
    SyncError,
    ValidationError,
    WorkspaceError,
)
from pagesync.core.deploy.models import (
    BranchState,
    CommitIdentity,
    DeploymentRequest,
    DeployOutcome,
    DeployResult,
    ReconcileState,
)
from pagesync.core.deploy.service import DeployService

__all__ = [
    "AuthError",
    "BranchReconciliationError",
    "BranchState",
    "CleanupError",
    "CloneError",
    "CommitError",
    "CommitIdentity",
    "DeployError",
    "DeployOutcome",
    "DeployResult",
    "DeployService",
    "DeploymentRequest",
    "FetchError",
    "GitError",
    "PublishError",
    "ReconcileState",
    "SyncError",
    "ValidationError",
    "WorkspaceError",
]
