"""Configuration management for ccTracker.

Loads configuration hierarchically: defaults -> TOML config file ->
environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import toml

from cctracker.exceptions import ConfigurationError, PolicyNotFoundError
from cctracker.models import Config
from cctracker.policy import get_policy

CONFIG_FILENAME = "cctracker.toml"

ENV_MAPPINGS: dict[str, str] = {
    "CCTRACKER_HOST": "server.host",
    "CCTRACKER_PORT": "server.port",
    "CCTRACKER_ANNOUNCE_INTERVAL": "announcer.announce_interval",
    "CCTRACKER_PRIORITY_POLICY": "peer_handout_policy.priority",
    "CCTRACKER_SAMPLING_POLICY": "peer_handout_policy.sampling",
    "CCTRACKER_LOG_LEVEL": "observability.log_level",
    "CCTRACKER_LOG_FILE": "observability.log_file",
    "CCTRACKER_STRUCTURED_LOGGING": "observability.structured_logging",
    "CCTRACKER_RICH_CONSOLE": "observability.rich_console",
}

# Values that must stay strings even when they look numeric or boolean
_STRING_PATHS = {
    "server.host",
    "peer_handout_policy.priority",
    "peer_handout_policy.sampling",
    "observability.log_level",
    "observability.log_file",
}


def _parse_env_value(raw: str, path: str) -> bool | int | float | str:
    if path in _STRING_PATHS:
        return raw
    low = raw.lower()
    if low in {"true", "1", "yes", "on"}:
        return True
    if low in {"false", "0", "no", "off"}:
        return False
    try:
        if "." in raw:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for cctracker.toml

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()

    def _find_config_file(self, config_file: str | Path | None) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        search_paths = [
            Path.cwd() / CONFIG_FILENAME,
            Path.home() / ".config" / "cctracker" / CONFIG_FILENAME,
        ]
        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file is not None:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise ConfigurationError(msg)
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except toml.TomlDecodeError as e:
                msg = f"Invalid TOML in {self.config_file}: {e}"
                raise ConfigurationError(msg) from e
            logging.debug("Loaded config file %s", self.config_file)

        config_data = self._merge_config(config_data, self._get_env_config())

        try:
            config = Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

        policy = config.peer_handout_policy
        try:
            get_policy(policy.priority, policy.sampling)
        except PolicyNotFoundError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg, e.details) from e

        return config

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}
        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))
        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def export(self) -> str:
        """Export the effective configuration as TOML."""
        return toml.dumps(self.config.model_dump(mode="json", exclude_none=True))
