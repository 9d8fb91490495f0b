"""Configuration management for claudemonitor."""

from claudemonitor.config.credentials import CLAUDE_CREDENTIALS_FILE, read_credential
from claudemonitor.config.paths import (
    config_dir,
    config_file,
    projects_dir,
    stats_cache_file,
)
from claudemonitor.config.settings import (
    AutomationConfig,
    Config,
    CredentialsConfig,
    FetchConfig,
    GraphConfig,
    MetricThresholds,
    PathsConfig,
    config_to_dict,
    get_config,
    load_config,
    reload_config,
    save_config,
)

__all__ = [
    # credentials
    "CLAUDE_CREDENTIALS_FILE",
    "read_credential",
    # paths
    "config_dir",
    "config_file",
    "projects_dir",
    "stats_cache_file",
    # settings
    "AutomationConfig",
    "Config",
    "CredentialsConfig",
    "FetchConfig",
    "GraphConfig",
    "MetricThresholds",
    "PathsConfig",
    "config_to_dict",
    "get_config",
    "load_config",
    "reload_config",
    "save_config",
]
