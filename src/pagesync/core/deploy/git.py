"""
Blocking git invocation for the deployment pipeline.

Every git call in a deployment goes through GitRunner. Calls block until the
subprocess exits and come back as GitResult values, so callers decide whether
a non-zero exit is an error (clone) or ordinary control flow (branch probes).

Any registered secret (the access token) is masked in logged command lines
and in the captured output before it leaves this module.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from pagesync.core.deploy.errors import GitError

logger = logging.getLogger(__name__)

REDACTED = "***"


@dataclass(frozen=True)
class GitResult:
    """Outcome of a single git invocation (already redacted)."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error_message(self) -> str:
        """Best available description of a failure."""
        return self.stderr or self.stdout or f"exit code {self.returncode}"


class GitRunner:
    """
    Runs git commands in a fixed working directory.

    Example:
        >>> runner = GitRunner(Path("/tmp/deploy-x/repo"), secrets=[token])
        >>> result = runner.run(["status", "--porcelain"])
        >>> if result.ok:
        ...     print(result.stdout)
    """

    def __init__(
        self,
        cwd: Path,
        *,
        secrets: Iterable[str] = (),
        env: dict[str, str] | None = None,
    ) -> None:
        self.cwd = cwd
        self.secrets = tuple(s for s in secrets if s)
        self._env = env

    def at(self, cwd: Path) -> GitRunner:
        """Runner for another directory sharing the same secrets and env."""
        return GitRunner(cwd, secrets=self.secrets, env=self._env)

    def redact(self, text: str) -> str:
        for secret in self.secrets:
            text = text.replace(secret, REDACTED)
        return text

    def _build_env(self) -> dict[str, str]:
        env = dict(os.environ if self._env is None else self._env)
        # Never wait on an interactive credential prompt
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    def run(
        self,
        args: Sequence[str],
        *,
        config: Sequence[str] = (),
        check: bool = False,
    ) -> GitResult:
        """
        Run ``git [config] args`` and return its result.

        Args:
            args: Git command arguments (without "git" prefix).
            config: Leading global options such as ``["-c", "user.name=x"]``.
            check: Raise GitError instead of returning a failed result.

        Returns:
            GitResult with redacted output (stdout right-stripped only, so
            porcelain status columns survive).

        Raises:
            GitError: If check=True and the command exits non-zero.
        """
        cmd = ["git", *config, *args]
        shown = [self.redact(part) for part in cmd]
        logger.debug("Running git command: %s", " ".join(shown))

        try:
            completed = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                env=self._build_env(),
            )
        except (FileNotFoundError, NotADirectoryError):
            if Path(self.cwd).is_dir():
                result = GitResult(shown, 127, "", "git not found in PATH")
            else:
                result = GitResult(shown, 1, "", f"Working directory does not exist: {self.cwd}")
        else:
            result = GitResult(
                command=shown,
                returncode=completed.returncode,
                stdout=self.redact((completed.stdout or "").rstrip()),
                stderr=self.redact((completed.stderr or "").strip()),
            )

        if not result.ok:
            logger.debug("git exited %d: %s", result.returncode, result.error_message)
            if check:
                raise GitError(
                    f"Git command failed: {' '.join(shown)}",
                    command=shown,
                    stderr=result.stderr,
                )
        return result
