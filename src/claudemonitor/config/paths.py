"""Platform-specific paths for claudemonitor configuration and Claude logs."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir

PACKAGE_NAME = "claudemonitor"


def _get_env_path(env_var: str, fallback: Path) -> Path:
    """Get path from environment variable or fallback."""
    if env_value := os.environ.get(env_var):
        return Path(env_value)
    return fallback


def config_dir() -> Path:
    """Get user config directory.

    Respects CLAUDEMONITOR_CONFIG_DIR environment variable.
    """
    base_dir = Path(user_config_dir(PACKAGE_NAME))
    return _get_env_path("CLAUDEMONITOR_CONFIG_DIR", base_dir)


def config_file() -> Path:
    """Get main config.toml path."""
    return config_dir() / "config.toml"


def projects_dir(claude_dir: Path) -> Path:
    """Directory tree holding per-session JSONL event logs."""
    return claude_dir / "projects"


def stats_cache_file(claude_dir: Path) -> Path:
    """Daily aggregate token cache written by Claude Code."""
    return claude_dir / "stats-cache.json"
