"""Configuration structures and loading for claudemonitor."""

import os
from pathlib import Path
from typing import Literal

import msgspec

from claudemonitor.config.credentials import CLAUDE_CREDENTIALS_FILE
from claudemonitor.models import UtilizationLevel

# Default values
DEFAULT_TIMEOUT = 30.0
DEFAULT_REFRESH_INTERVAL = 180.0
DEFAULT_WINDOW_HOURS = 3.0
DEFAULT_KEYCHAIN_SERVICE = "Claude Code-credentials"


# Automation configuration
class AutomationConfig(msgspec.Struct, omit_defaults=True):
    """When to launch the external automation script."""

    enabled: bool = False
    five_hour_threshold: float = 80.0
    seven_day_threshold: float = 50.0
    script_path: str | None = None


# Token history graph configuration
class GraphConfig(msgspec.Struct, omit_defaults=True):
    """Token history settings."""

    time_window_hours: float = DEFAULT_WINDOW_HOURS


class MetricThresholds(msgspec.Struct, omit_defaults=True):
    """Utilization bands for one quota window."""

    yellow: float
    red: float


# Fetch configuration
class FetchConfig(msgspec.Struct, omit_defaults=True):
    """Fetch behavior settings."""

    timeout: float = DEFAULT_TIMEOUT
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL


# Credentials configuration
class CredentialsConfig(msgspec.Struct, omit_defaults=True):
    """Where the OAuth credential is looked up."""

    service: str = DEFAULT_KEYCHAIN_SERVICE
    account: str | None = None  # None means the current OS user
    credentials_file: str = CLAUDE_CREDENTIALS_FILE


class PathsConfig(msgspec.Struct, omit_defaults=True):
    """Location of Claude Code's local data."""

    claude_dir: str = "~/.claude"

    def claude_path(self) -> Path:
        return Path(self.claude_dir).expanduser()


# Main configuration
class Config(msgspec.Struct, omit_defaults=True):
    """Main configuration structure."""

    log_level: str = "WARNING"
    automation: AutomationConfig = msgspec.field(default_factory=AutomationConfig)
    graph: GraphConfig = msgspec.field(default_factory=GraphConfig)
    five_hour: MetricThresholds = msgspec.field(
        default_factory=lambda: MetricThresholds(yellow=50.0, red=80.0)
    )
    seven_day: MetricThresholds = msgspec.field(
        default_factory=lambda: MetricThresholds(yellow=80.0, red=95.0)
    )
    fetch: FetchConfig = msgspec.field(default_factory=FetchConfig)
    credentials: CredentialsConfig = msgspec.field(default_factory=CredentialsConfig)
    paths: PathsConfig = msgspec.field(default_factory=PathsConfig)

    def level_for(
        self, utilization: float, metric: Literal["five_hour", "seven_day"]
    ) -> UtilizationLevel:
        """Classify a utilization value against the metric's thresholds."""
        thresholds = self.five_hour if metric == "five_hour" else self.seven_day
        if utilization < thresholds.yellow:
            return UtilizationLevel.GREEN
        if utilization < thresholds.red:
            return UtilizationLevel.YELLOW
        return UtilizationLevel.RED


def _load_from_toml(path: Path) -> dict:
    """Load configuration from TOML file."""
    import tomllib

    if not path.exists():
        return {}

    with path.open("rb") as f:
        return tomllib.load(f)


def _save_to_toml(data: dict, path: Path) -> None:
    """Save configuration to TOML file."""
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)


def convert_config(data: dict) -> Config:
    """Convert raw dict to Config struct."""
    return msgspec.convert(data, type=Config)


def config_to_dict(config: Config) -> dict:
    """Effective settings as plain data, defaults included.

    Unset optional values are dropped since TOML has no null.
    """
    data = {}
    for name, value in msgspec.structs.asdict(config).items():
        if isinstance(value, msgspec.Struct):
            value = {
                key: item
                for key, item in msgspec.structs.asdict(value).items()
                if item is not None
            }
        data[name] = value
    return data


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config.

    CLAUDEMONITOR_SCRIPT_PATH: Automation script path
    CLAUDEMONITOR_WINDOW_HOURS: Token history window in hours
    """
    if script_path := os.environ.get("CLAUDEMONITOR_SCRIPT_PATH"):
        automation = msgspec.structs.replace(config.automation, script_path=script_path)
        config = msgspec.structs.replace(config, automation=automation)

    if window := os.environ.get("CLAUDEMONITOR_WINDOW_HOURS"):
        try:
            hours = float(window)
        except ValueError:
            hours = None
        if hours is not None and hours > 0:
            graph = msgspec.structs.replace(config.graph, time_window_hours=hours)
            config = msgspec.structs.replace(config, graph=graph)

    return config


# Config state storage
_config: Config | None = None


def get_config() -> Config:
    """Get the current configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = load_config()
    return _config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file with defaults."""
    from .paths import config_file

    config_path = path or config_file()

    raw_data = _load_from_toml(config_path)
    if not raw_data:
        config = Config()
    else:
        config = convert_config(raw_data)

    return _apply_env_overrides(config)


def save_config(config: Config, path: Path | None = None) -> None:
    """Save configuration to file."""
    from .paths import config_file

    config_path = path or config_file()

    # TOML has no null; omit_defaults drops unset optionals
    data = msgspec.to_builtins(config)
    _save_to_toml(data, config_path)

    global _config
    _config = config
