"""
Pytest configuration and shared fixtures.

Provides real git repositories for the deployment pipeline: a bare "remote"
repository (with and without a gh-pages branch), working clones of it, and a
sample artifact tree.
"""

import subprocess
from pathlib import Path

import pytest
from pydantic import SecretStr

from pagesync.core.config import clear_cache
from pagesync.core.config.models import DeployConfig
from pagesync.core.deploy.models import DeploymentRequest
from pagesync.core.github.models import RepoInfo

GIT_IDENTITY = ["-c", "user.name=Test User", "-c", "user.email=test@example.com"]


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return stripped stdout (raises on failure)."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    """Write, stage and commit a single file; return the new HEAD sha."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git(repo, "add", name)
    git(repo, *GIT_IDENTITY, "commit", "-m", message)
    return git(repo, "rev-parse", "HEAD")


# ==============================================================================
# Configuration Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, cached config and CI variables out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for name in (
        "GITHUB_SHA",
        "GITHUB_TOKEN",
        "GITHUB_REPOSITORY",
        "PAGESYNC_BRANCH",
        "PAGESYNC_REMOTE_URL",
        "PAGESYNC_API_URL",
        "PAGESYNC_WORKSPACE_DIR",
        "PAGESYNC_INCLUDE_HIDDEN",
        "PAGESYNC_VALIDATE_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def remote_repo(tmp_path) -> Path:
    """
    Provide a bare repository acting as the remote.

    Contains a ``main`` branch with a single README commit and no gh-pages.
    """
    bare = tmp_path / "remote.git"
    subprocess.run(
        ["git", "init", "--bare", "--initial-branch=main", str(bare)],
        capture_output=True,
        check=True,
    )

    seed = tmp_path / "seed"
    subprocess.run(["git", "clone", str(bare), str(seed)], capture_output=True, check=True)
    commit_file(seed, "README.md", "# Project\n", "Initial commit")
    git(seed, "push", "origin", "HEAD:refs/heads/main")

    return bare


@pytest.fixture
def remote_with_pages(remote_repo, tmp_path) -> Path:
    """Bare remote that already has a gh-pages branch with old content."""
    seed = tmp_path / "seed"
    git(seed, "checkout", "--orphan", "gh-pages")
    git(seed, "rm", "-r", "-q", "--cached", ".")
    (seed / "README.md").unlink()
    commit_file(seed, "old.html", "<p>old</p>\n", "Old deployment")
    git(seed, "push", "origin", "gh-pages")
    return remote_repo


@pytest.fixture
def clone_of(tmp_path):
    """Factory cloning a remote into a fresh working directory."""
    counter = {"n": 0}

    def _clone(remote: Path) -> Path:
        counter["n"] += 1
        dest = tmp_path / f"clone-{counter['n']}"
        subprocess.run(
            ["git", "clone", "--no-single-branch", str(remote), str(dest)],
            capture_output=True,
            check=True,
        )
        return dest

    return _clone


# ==============================================================================
# Artifact Fixtures
# ==============================================================================


@pytest.fixture
def artifact_tree(tmp_path) -> Path:
    """Provide the minimal site: index.html and assets/style.css."""
    site = tmp_path / "site"
    (site / "assets").mkdir(parents=True)
    (site / "index.html").write_text("<html><body>Hello</body></html>\n")
    (site / "assets" / "style.css").write_text("body { color: #333; }\n")
    return site


# ==============================================================================
# Deployment Fixtures
# ==============================================================================


@pytest.fixture
def deploy_config(remote_repo, tmp_path) -> DeployConfig:
    """Deploy config pointing at the local bare remote, token check disabled."""
    return DeployConfig(
        remote_url=remote_repo.as_uri(),
        validate_token=False,
        workspace_dir=tmp_path / "workspaces",
    )


@pytest.fixture
def make_request(artifact_tree):
    """Factory for deployment requests against ``owner/site``."""

    def _make(**overrides) -> DeploymentRequest:
        values = {
            "artifact_path": artifact_tree,
            "repo": RepoInfo(owner="owner", repo="site"),
            "token": SecretStr("ghs_testtoken123"),
            "revision": "3f2c1a9d",
        }
        values.update(overrides)
        return DeploymentRequest(**values)

    return _make
