"""
Ephemeral workspace for one deployment run.

The workspace is a uniquely named temporary directory that holds the clone.
It is removed when the run ends, whether it succeeded or failed.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from pagesync.core.deploy.errors import CleanupError, WorkspaceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    """
    A directory exclusively owned by one deployment run.

    Attributes:
        root: The temporary directory itself
    """

    root: Path

    @property
    def repo_dir(self) -> Path:
        """Where the target repository is cloned."""
        return self.root / "repo"


class WorkspaceManager:
    """
    Creates and removes deployment workspaces.

    Example:
        >>> manager = WorkspaceManager()
        >>> with manager.acquire() as workspace:
        ...     clone_into(workspace.repo_dir)
        >>> workspace.root.exists()
        False
    """

    PREFIX = "deploy-"

    def __init__(self, base_dir: Path | None = None) -> None:
        """
        Args:
            base_dir: Parent directory for workspaces (defaults to system temp)
        """
        self.base_dir = base_dir

    def create(self) -> Workspace:
        """
        Create a new uniquely named workspace directory.

        Raises:
            WorkspaceError: If the base directory is unusable.
        """
        try:
            if self.base_dir is not None:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            root = Path(tempfile.mkdtemp(prefix=self.PREFIX, dir=self.base_dir))
        except OSError as e:
            raise WorkspaceError(
                f"Failed to create workspace under {self.base_dir or tempfile.gettempdir()}",
                detail=str(e),
            ) from e
        logger.debug("Created workspace %s", root)
        return Workspace(root=root)

    def release(self, workspace: Workspace) -> CleanupError | None:
        """
        Recursively remove a workspace.

        Returns:
            CleanupError if removal failed, None otherwise. Never raises.
        """
        try:
            shutil.rmtree(workspace.root)
        except FileNotFoundError:
            return None
        except OSError as e:
            return CleanupError(f"Failed to remove workspace {workspace.root}", detail=str(e))
        logger.debug("Removed workspace %s", workspace.root)
        return None

    @contextmanager
    def acquire(self) -> Iterator[Workspace]:
        """Yield a fresh workspace that is removed on exit."""
        workspace = self.create()
        try:
            yield workspace
        finally:
            error = self.release(workspace)
            if error is not None:
                logger.warning("Cleanup warning: %s", error.describe())
