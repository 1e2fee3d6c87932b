"""
Tests for ChangeCommitter.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import git
from pagesync.core.config.models import CommitIdentity
from pagesync.core.deploy.committer import (
    DEFAULT_MESSAGE_TEMPLATE,
    ChangeCommitter,
    FileChange,
    render_commit_message,
)
from pagesync.core.deploy.errors import CommitError, GitError
from pagesync.core.deploy.git import GitResult, GitRunner


@pytest.fixture
def work_repo(remote_repo: Path, clone_of) -> Path:
    clone = clone_of(remote_repo)
    # Commits must take their author from CommitIdentity, not repository config
    GitRunner(clone).run(["config", "--unset", "user.name"])
    GitRunner(clone).run(["config", "--unset", "user.email"])
    return clone


class TestRenderCommitMessage:
    """Tests for render_commit_message."""

    def test_default_template(self) -> None:
        message = render_commit_message(DEFAULT_MESSAGE_TEMPLATE, "3f2c1a9d")
        assert message == "Deploy documentation from 3f2c1a9d"

    def test_custom_template(self) -> None:
        assert render_commit_message("site @ {revision}", "v1.2") == "site @ v1.2"

    def test_other_braces_untouched(self) -> None:
        assert render_commit_message("{name} {revision}", "abc") == "{name} abc"


class TestFileChange:
    """Tests for porcelain parsing."""

    def test_modified(self) -> None:
        change = FileChange.from_porcelain(" M index.html")
        assert change == FileChange(status="M", path="index.html")

    def test_added(self) -> None:
        assert FileChange.from_porcelain("A  assets/style.css").path == "assets/style.css"

    def test_deleted(self) -> None:
        assert FileChange.from_porcelain("D  old.html").status == "D"


class TestCommitChanges:
    """Tests against a real working copy."""

    def test_no_changes_returns_none(self, work_repo: Path) -> None:
        committer = ChangeCommitter(GitRunner(work_repo), CommitIdentity())
        before = git(work_repo, "rev-parse", "HEAD")

        assert committer.commit_changes("Deploy documentation from abc") is None
        assert git(work_repo, "rev-parse", "HEAD") == before

    def test_commits_once_with_identity(self, work_repo: Path) -> None:
        (work_repo / "index.html").write_text("<p>new</p>")
        (work_repo / "README.md").unlink()
        committer = ChangeCommitter(GitRunner(work_repo), CommitIdentity())

        result = committer.commit_changes("Deploy documentation from 3f2c1a9d")

        assert result is not None
        assert result.sha == git(work_repo, "rev-parse", "HEAD")
        assert git(work_repo, "log", "-1", "--format=%s") == "Deploy documentation from 3f2c1a9d"
        assert git(work_repo, "log", "-1", "--format=%an <%ae>") == (
            "github-actions[bot] <github-actions[bot]@users.noreply.github.com>"
        )
        assert {c.path for c in result.changes} == {"index.html", "README.md"}
        assert git(work_repo, "rev-list", "--count", "HEAD") == "2"

    def test_identity_not_persisted(self, work_repo: Path) -> None:
        (work_repo / "index.html").write_text("x")
        ChangeCommitter(GitRunner(work_repo), CommitIdentity()).commit_changes("m")

        result = GitRunner(work_repo).run(["config", "--local", "--get", "user.name"])
        assert not result.ok

    def test_custom_identity(self, work_repo: Path) -> None:
        (work_repo / "index.html").write_text("x")
        identity = CommitIdentity(name="Docs Bot", email="docs@example.com")

        ChangeCommitter(GitRunner(work_repo), identity).commit_changes("m")

        assert git(work_repo, "log", "-1", "--format=%an <%ae>") == "Docs Bot <docs@example.com>"

    def test_second_call_is_noop(self, work_repo: Path) -> None:
        (work_repo / "index.html").write_text("x")
        committer = ChangeCommitter(GitRunner(work_repo), CommitIdentity())

        assert committer.commit_changes("first") is not None
        assert committer.commit_changes("second") is None

    def test_untracked_nested_files_detected(self, work_repo: Path) -> None:
        (work_repo / "a" / "b").mkdir(parents=True)
        (work_repo / "a" / "b" / "deep.html").write_text("deep")
        committer = ChangeCommitter(GitRunner(work_repo), CommitIdentity())

        committer.stage_all()
        changes = committer.detect_changes()

        assert [c.path for c in changes] == ["a/b/deep.html"]


class TestCommitErrors:
    """Git failures become CommitError."""

    def _runner(self, *results: GitResult) -> MagicMock:
        runner = MagicMock(spec=GitRunner)
        runner.run.side_effect = list(results)
        return runner

    def test_stage_failure(self) -> None:
        runner = self._runner(GitResult(["git"], 128, "", "fatal: index.lock exists"))

        with pytest.raises(CommitError) as exc_info:
            ChangeCommitter(runner, CommitIdentity()).commit_changes("m")

        assert exc_info.value.stage == "commit"
        assert "index.lock" in exc_info.value.detail

    def test_commit_failure(self) -> None:
        runner = self._runner(
            GitResult(["git"], 0, "", ""),
            GitResult(["git"], 0, "A  index.html", ""),
            GitResult(["git"], 1, "", "error: commit failed"),
        )

        with pytest.raises(CommitError):
            ChangeCommitter(runner, CommitIdentity()).commit_changes("m")

    def test_unresolvable_head(self) -> None:
        runner = MagicMock(spec=GitRunner)
        runner.run.side_effect = [
            GitResult(["git"], 0, "", ""),
            GitResult(["git"], 0, "A  index.html", ""),
            GitResult(["git"], 0, "", ""),
            GitError("Git command failed", ["git", "rev-parse", "HEAD"], "fatal: bad HEAD"),
        ]

        with pytest.raises(CommitError, match="resolve new commit") as exc_info:
            ChangeCommitter(runner, CommitIdentity()).commit_changes("m")

        assert exc_info.value.detail == "fatal: bad HEAD"
        assert runner.run.call_args.kwargs == {"check": True}
