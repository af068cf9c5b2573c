"""Centralized configuration for the project registry.

Configuration is loaded from an optional YAML file, overlaid with environment
variables, and validated before use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from storyarch.utils.result import ConfigError, Err, Ok, Result

DEFAULT_SNAPSHOT_PATH = Path("./data/projects.json")
SNAPSHOT_PATH_ENV = "STORYARCH_SNAPSHOT"

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")
LOG_FORMATS = ("json", "text")


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class RegistryConfig:
    """
    Complete registry configuration.

    Attributes:
        snapshot_path: Location of the persisted project snapshot
        logging: Logging settings
    """

    snapshot_path: Path = DEFAULT_SNAPSHOT_PATH
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> Result["RegistryConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="yaml",
                message="Configuration root must be a mapping",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["RegistryConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        logging_data = data.get("logging") or {}
        if not isinstance(logging_data, dict):
            return Err(ConfigError(
                field="logging",
                message="Must be a mapping",
            ))

        snapshot_path = data.get("snapshot_path", str(DEFAULT_SNAPSHOT_PATH))
        if not isinstance(snapshot_path, str):
            return Err(ConfigError(
                field="snapshot_path",
                message=f"Must be a string, got {snapshot_path!r}",
            ))

        return Ok(cls(
            snapshot_path=Path(snapshot_path),
            logging=LoggingConfig(
                level=str(logging_data.get("level", "info")),
                format=str(logging_data.get("format", "json")),
            ),
        ))

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        if not str(self.snapshot_path).strip():
            return Err(ConfigError(
                field="snapshot_path",
                message="Must not be empty",
            ))
        if self.snapshot_path.is_dir():
            return Err(ConfigError(
                field="snapshot_path",
                message=f"Is a directory: {self.snapshot_path}",
            ))

        if self.logging.level.lower() not in LOG_LEVELS:
            return Err(ConfigError(
                field="logging.level",
                message=f"Must be one of {', '.join(LOG_LEVELS)}, got {self.logging.level}",
            ))
        if self.logging.format.lower() not in LOG_FORMATS:
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be one of {', '.join(LOG_FORMATS)}, got {self.logging.format}",
            ))

        return Ok(None)

    def with_snapshot_path(self, snapshot_path: Optional[Path]) -> "RegistryConfig":
        """Return a new config with the snapshot path replaced when given."""
        if snapshot_path is None:
            return self
        return replace(self, snapshot_path=Path(snapshot_path))


def load_config(
    config_dir: Path = None,
    snapshot_path: Optional[Path] = None,
) -> Result[RegistryConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Loads config/defaults.yaml when present, then applies the
    STORYARCH_SNAPSHOT environment override, then an explicit snapshot
    path. Validation runs once, on the final values.

    Args:
        config_dir: Configuration directory (defaults to ./config)
        snapshot_path: Snapshot path that overrides file and environment

    Returns:
        Result with loaded config or error
    """
    if config_dir is None:
        config_dir = Path("./config")

    defaults_path = Path(config_dir) / "defaults.yaml"
    if defaults_path.exists():
        result = RegistryConfig.from_yaml(defaults_path)
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = RegistryConfig()

    env_snapshot = get_env_snapshot_path()
    if env_snapshot:
        config = config.with_snapshot_path(Path(env_snapshot))
    config = config.with_snapshot_path(snapshot_path)

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)


def get_env_snapshot_path() -> Optional[str]:
    """Get the snapshot path override from environment."""
    return os.environ.get(SNAPSHOT_PATH_ENV)
