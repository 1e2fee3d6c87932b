"""
Data models for the deployment pipeline.

Pydantic models describe the request and the terminal result of one
deployment run; the enums name the branch reconciliation states.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from pagesync.core.config.models import CommitIdentity
from pagesync.core.github.models import RepoInfo
from pagesync.utils.git import is_valid_branch_name

__all__ = [
    "BranchState",
    "CommitIdentity",
    "DeployOutcome",
    "DeployResult",
    "DeploymentRequest",
    "ReconcileState",
]


class BranchState(str, Enum):
    """Where the target branch existed before reconciliation."""

    ABSENT = "absent"
    LOCAL_ONLY = "local_only"
    REMOTE_ONLY = "remote_only"
    LOCAL_AND_REMOTE = "local_and_remote"


class ReconcileState(str, Enum):
    """States of the branch reconciliation state machine."""

    START = "start"
    PROBE_LOCAL = "probe_local"
    PROBE_REMOTE = "probe_remote"
    USE_LOCAL = "use_local"
    TRACK_REMOTE = "track_remote"
    CREATE_ORPHAN = "create_orphan"
    READY = "ready"


class DeployOutcome(str, Enum):
    """Terminal outcome of a deployment run."""

    PUBLISHED = "published"
    NO_CHANGES = "no-changes"
    FAILED = "failed"


class DeploymentRequest(BaseModel):
    """
    Everything one deployment run needs. Immutable for the run.

    Example:
        >>> request = DeploymentRequest(
        ...     artifact_path=Path("docs-output"),
        ...     repo=RepoInfo(owner="user", repo="site"),
        ...     token=SecretStr("ghs_..."),
        ...     revision="3f2c1a9",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    artifact_path: Path = Field(..., description="Root of the built artifact tree")
    branch: str = Field(default="gh-pages", description="Publishing branch")
    repo: RepoInfo = Field(..., description="Target repository coordinates")
    token: SecretStr = Field(..., description="Bearer token with write access")
    revision: str = Field(..., description="Source revision embedded in the commit message")

    @field_validator("branch")
    @classmethod
    def _check_branch(cls, value: str) -> str:
        if not is_valid_branch_name(value):
            raise ValueError(f"Invalid branch name: {value!r}")
        return value

    @field_validator("revision")
    @classmethod
    def _check_revision(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("revision cannot be empty")
        return value


class DeployResult(BaseModel):
    """
    Terminal result of a deployment run.

    ``artifact_path`` is only set on success (published or no-changes);
    ``reason`` and ``stage`` only on failure.
    """

    outcome: DeployOutcome
    branch: str
    artifact_path: Path | None = None
    commit_sha: str | None = None
    branch_state: BranchState | None = None
    forced_push: bool = False
    files_synced: int = 0
    reason: str | None = None
    stage: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome != DeployOutcome.FAILED
