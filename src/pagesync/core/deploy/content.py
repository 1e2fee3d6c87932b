"""
Content synchronization between an artifact tree and a repository root.

The repository root is emptied (except for ``.git``) and the artifact tree is
copied in. Both traversals use an explicit stack and collect failures as
values, so a single SyncError can name every offending path.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from pagesync.core.deploy.errors import SyncError

logger = logging.getLogger(__name__)

METADATA_DIR = ".git"
HIDDEN_PREFIX = "."


@dataclass(frozen=True)
class SyncFailure:
    """A path that could not be removed, read or written."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass
class SyncReport:
    """What a synchronization run did."""

    removed: int = 0
    files_copied: int = 0
    directories_created: int = 0
    skipped: list[Path] = field(default_factory=list)


class ContentSynchronizer:
    """
    Replaces a repository's tracked content with an artifact tree.

    Entries whose name starts with ``.`` are skipped at every depth unless
    ``include_hidden`` is set. ``.git`` is never removed from the target and
    never copied from the source.

    Example:
        >>> report = ContentSynchronizer().sync(Path("site"), workspace.repo_dir)
        >>> report.files_copied
        2
    """

    def __init__(self, include_hidden: bool = False) -> None:
        self.include_hidden = include_hidden

    def sync(self, source: Path, target: Path) -> SyncReport:
        """
        Make ``target`` (minus ``.git``) mirror ``source``.

        Raises:
            SyncError: If the source is unusable or any entry fails.
        """
        if not source.is_dir():
            raise SyncError(f"Artifact tree is not a directory: {source}", paths=[str(source)])
        if not target.is_dir():
            raise SyncError(f"Repository root is not a directory: {target}", paths=[str(target)])

        report = SyncReport()
        failures = self.clear(target, report)
        if failures:
            raise self._error("Failed to remove existing content", failures)

        logger.info("Copying artifact files from %s", source)
        failures = self.copy_tree(source, target, report)
        if failures:
            raise self._error("Failed to copy artifact tree", failures)

        logger.info(
            "Synchronized %d files (%d entries removed, %d hidden skipped)",
            report.files_copied,
            report.removed,
            len(report.skipped),
        )
        return report

    def clear(self, target: Path, report: SyncReport | None = None) -> list[SyncFailure]:
        """Remove every top-level entry in ``target`` except ``.git``."""
        report = report if report is not None else SyncReport()
        failures: list[SyncFailure] = []
        try:
            entries = sorted(target.iterdir())
        except OSError as e:
            return [SyncFailure(target, str(e))]

        for entry in entries:
            if entry.name == METADATA_DIR:
                continue
            entry_failures = _remove_tree(entry)
            if entry_failures:
                failures.extend(entry_failures)
            else:
                report.removed += 1
        return failures

    def is_excluded(self, name: str) -> bool:
        if name == METADATA_DIR:
            return True
        return not self.include_hidden and name.startswith(HIDDEN_PREFIX)

    def copy_tree(
        self, source: Path, target: Path, report: SyncReport | None = None
    ) -> list[SyncFailure]:
        """Copy ``source`` into ``target`` preserving structure, bytes and modes."""
        report = report if report is not None else SyncReport()
        failures: list[SyncFailure] = []
        stack: list[tuple[Path, Path]] = [(source, target)]

        while stack:
            src_dir, dst_dir = stack.pop()
            try:
                children = sorted(src_dir.iterdir())
            except OSError as e:
                failures.append(SyncFailure(src_dir, str(e)))
                continue

            for src in children:
                if self.is_excluded(src.name):
                    report.skipped.append(src.relative_to(source))
                    continue

                dst = dst_dir / src.name
                try:
                    if src.is_symlink():
                        os.symlink(os.readlink(src), dst)
                        report.files_copied += 1
                    elif src.is_dir():
                        dst.mkdir(exist_ok=True)
                        report.directories_created += 1
                        stack.append((src, dst))
                    else:
                        shutil.copy2(src, dst, follow_symlinks=False)
                        report.files_copied += 1
                except OSError as e:
                    failures.append(SyncFailure(src, str(e)))

        return failures

    @staticmethod
    def _error(message: str, failures: list[SyncFailure]) -> SyncError:
        for failure in failures:
            logger.debug("Sync failure: %s", failure)
        return SyncError(
            message,
            detail="; ".join(str(f) for f in failures),
            paths=[str(f.path) for f in failures],
        )


def _remove_tree(path: Path) -> list[SyncFailure]:
    """
    Remove a file, link or directory tree without following links.

    Files are unlinked as they are found; directories are removed afterwards,
    deepest first.
    """
    failures: list[SyncFailure] = []
    directories: list[Path] = []
    stack = [path]

    while stack:
        current = stack.pop()
        if current.is_dir() and not current.is_symlink():
            directories.append(current)
            try:
                stack.extend(current.iterdir())
            except OSError as e:
                failures.append(SyncFailure(current, str(e)))
            continue
        try:
            current.unlink()
        except OSError as e:
            failures.append(SyncFailure(current, str(e)))

    if failures:
        return failures

    for directory in reversed(directories):
        try:
            directory.rmdir()
        except OSError as e:
            failures.append(SyncFailure(directory, str(e)))
    return failures
