"""
Configuration data models for pagesync.

These models define the structure of .pagesync.json and
~/.config/pagesync/config.json files, with validation and type safety via
Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pagesync.core.github.models import RepoInfo
from pagesync.utils.git import is_valid_branch_name


class CommitIdentity(BaseModel):
    """
    Author/committer identity for deployment commits.

    Passed explicitly into each git invocation that may create a commit;
    never written to global or repository git config.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        default="github-actions[bot]",
        min_length=1,
        description="user.name for deployment commits"
    )
    email: str = Field(
        default="github-actions[bot]@users.noreply.github.com",
        min_length=1,
        description="user.email for deployment commits"
    )

    def as_git_config(self) -> list[str]:
        """Leading ``-c`` options for a git command line."""
        return ["-c", f"user.name={self.name}", "-c", f"user.email={self.email}"]


class DeployConfig(BaseModel):
    """
    How and where artifact trees are published.

    Defaults target the GitHub Pages convention (a ``gh-pages`` branch
    committed to by the GitHub Actions bot).
    """
    branch: str = Field(
        default="gh-pages",
        description="Branch that receives the artifact tree"
    )
    remote_name: str = Field(
        default="origin",
        min_length=1,
        description="Name given to the cloned remote"
    )
    host: str = Field(
        default="github.com",
        min_length=1,
        description="Git host used to build the clone URL"
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="REST API root used for token validation"
    )
    remote_url: Optional[str] = Field(
        default=None,
        description="Explicit clone URL (overrides host/owner/repo)"
    )
    clone_depth: int = Field(
        default=1,
        ge=1,
        description="History depth fetched for every branch"
    )
    include_hidden: bool = Field(
        default=False,
        description="Copy dot-prefixed artifact entries (e.g. .nojekyll)"
    )
    commit_message: str = Field(
        default="Deploy documentation from {revision}",
        min_length=1,
        description="Commit message template; {revision} is substituted"
    )
    workspace_dir: Optional[Path] = Field(
        default=None,
        description="Parent directory for ephemeral workspaces (system temp if unset)"
    )
    validate_token: bool = Field(
        default=True,
        description="Check repository access via the API before cloning"
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout in seconds for API requests"
    )
    identity: CommitIdentity = Field(
        default_factory=CommitIdentity,
        description="Author and committer of deployment commits"
    )

    @field_validator("branch")
    @classmethod
    def validate_branch(cls, v: str) -> str:
        if not is_valid_branch_name(v):
            raise ValueError(f"Invalid branch name: {v!r}")
        return v

    def clone_url_for(self, repo: RepoInfo) -> str:
        """Credential-free clone URL for a repository."""
        if self.remote_url:
            return self.remote_url
        return repo.clone_url(self.host)


class PagesyncConfig(BaseModel):
    """
    Top-level pagesync configuration.

    Merged from defaults, user config, project config and PAGESYNC_* env vars.
    """
    model_config = ConfigDict(extra="ignore")

    deploy: DeployConfig = Field(default_factory=DeployConfig)
