"""Loading deployment inputs from .env files.

Outside CI the values a workflow would export (GITHUB_TOKEN,
GITHUB_REPOSITORY, GITHUB_SHA) and pagesync's own PAGESYNC_* overrides can
be kept in .env files. Files are read in this order, later ones winning:

- ~/.config/pagesync/.env (or the XDG equivalent)
- .env in the project directory
- .env.local in the project directory

Only those keys are taken; anything else in the files is left out of the
process environment. A variable already exported by the caller is never
overridden.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

GITHUB_KEYS = ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITHUB_SHA")
PAGESYNC_PREFIX = "PAGESYNC_"


def is_deploy_key(key: str) -> bool:
    """True for the variables pagesync reads from the environment."""
    return key in GITHUB_KEYS or key.startswith(PAGESYNC_PREFIX)


def default_env_files(project_dir: Path | None = None) -> list[Path]:
    """User .env first, then the project's .env and .env.local."""
    if project_dir is None:
        project_dir = Path.cwd()
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return [
        xdg_home / "pagesync" / ".env",
        project_dir / ".env",
        project_dir / ".env.local",
    ]


def read_env_file(path: Path) -> dict[str, str]:
    """Deployment keys defined in one .env file (empty if it is missing)."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if value is not None and is_deploy_key(key)
    }


def load_layered_env(
    project_dir: Path | None = None,
    env_files: Iterable[Path] | None = None,
) -> list[str]:
    """
    Export deployment keys from .env files into ``os.environ``.

    Args:
        project_dir: Directory holding .env and .env.local (defaults to cwd)
        env_files: Explicit files in precedence order, lowest first

    Returns:
        Names of the variables that were set, without their values
    """
    if env_files is None:
        env_files = default_env_files(project_dir)

    merged: dict[str, str] = {}
    for path in env_files:
        merged.update(read_env_file(Path(path)))

    applied = sorted(key for key in merged if key not in os.environ)
    for key in applied:
        os.environ[key] = merged[key]

    if applied:
        logger.debug("Loaded %s from .env files", ", ".join(applied))
    return applied
