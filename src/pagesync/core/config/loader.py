"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import os
from pathlib import Path
from typing import Any

from pagesync.utils.git import is_valid_branch_name

from .models import PagesyncConfig

# Global cache to avoid reloading config multiple times per process
_config_cache: PagesyncConfig | None = None

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off", "")


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/pagesync/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "pagesync" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .pagesync.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".pagesync.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> base = {"a": 1, "b": {"x": 10, "y": 20}}
        >>> override = {"b": {"y": 30, "z": 40}, "c": 3}
        >>> deep_merge(base, override)
        {"a": 1, "b": {"x": 10, "y": 30, "z": 40}, "c": 3}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system should be resilient to a broken file
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None


def _parse_bool(name: str, raw: str) -> bool | None:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    print(f"Warning: Invalid {name} value '{raw}', ignoring")
    return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        PAGESYNC_BRANCH - overrides deploy.branch
        PAGESYNC_REMOTE_URL - overrides deploy.remote_url
        PAGESYNC_API_URL - overrides deploy.api_url
        PAGESYNC_WORKSPACE_DIR - overrides deploy.workspace_dir
        PAGESYNC_INCLUDE_HIDDEN - overrides deploy.include_hidden
        PAGESYNC_VALIDATE_TOKEN - overrides deploy.validate_token

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()
    deploy = dict(result.get("deploy") or {})

    string_overrides = {
        "PAGESYNC_REMOTE_URL": "remote_url",
        "PAGESYNC_API_URL": "api_url",
        "PAGESYNC_WORKSPACE_DIR": "workspace_dir",
    }
    for env_name, key in string_overrides.items():
        if value := os.environ.get(env_name):
            deploy[key] = value

    # Checked here so a bad value is ignored instead of failing the whole config
    if branch := os.environ.get("PAGESYNC_BRANCH"):
        if is_valid_branch_name(branch):
            deploy["branch"] = branch
        else:
            print(f"Warning: Invalid PAGESYNC_BRANCH value '{branch}', ignoring")

    bool_overrides = {
        "PAGESYNC_INCLUDE_HIDDEN": "include_hidden",
        "PAGESYNC_VALIDATE_TOKEN": "validate_token",
    }
    for env_name, key in bool_overrides.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        parsed = _parse_bool(env_name, raw)
        if parsed is not None:
            deploy[key] = parsed

    if deploy:
        result["deploy"] = deploy
    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "deploy": {
            "branch": "gh-pages",
            "remote_name": "origin",
            "host": "github.com",
            "api_url": "https://api.github.com",
            "clone_depth": 1,
            "include_hidden": False,
            "commit_message": "Deploy documentation from {revision}",
            "validate_token": True,
            "identity": {
                "name": "github-actions[bot]",
                "email": "github-actions[bot]@users.noreply.github.com",
            },
        },
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> PagesyncConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (PAGESYNC_*)
        2. Project config (.pagesync.json)
        3. User config (~/.config/pagesync/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .pagesync.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated PagesyncConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.deploy.branch
        'gh-pages'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = PagesyncConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
