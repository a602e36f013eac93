"""
Configuration loader for the DynamoDB backup system.

Configuration comes from an optional YAML file and from environment
variables. Environment values that are set take precedence over the file.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import BackupSystemConfig

# Environment variable -> (section, key). A section of None means top level.
ENV_OVERRIDES = {
    "TABLE_REGEX": (None, "table_regex"),
    "BACKUP_EXPIRE_DAYS": (None, "backup_expire_days"),
    "STRICT_LISTING": (None, "strict_listing"),
    "BACKUP_NAME_INCLUDE_HOUR": ("naming", "include_hour"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMATTER": ("logging", "format"),
    "MAX_WORKERS": ("concurrency", "max_workers"),
    "MAX_DELETE_WORKERS": ("concurrency", "max_delete_workers"),
    "TIMEOUT_SECONDS": ("concurrency", "timeout_seconds"),
    "AWS_REGION": ("aws", "region_name"),
    "DYNAMODB_ENDPOINT_URL": ("aws", "endpoint_url"),
}


class ConfigLoader:
    """Builds validated BackupSystemConfig objects."""

    @staticmethod
    def load_from_file(
        config_path: Union[str, Path], env: Optional[Mapping[str, str]] = None
    ) -> BackupSystemConfig:
        """
        Load configuration from a YAML file, applying environment overrides.

        Args:
            config_path: Path to the YAML configuration file
            env: Environment mapping, defaults to os.environ

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Configuration root in {path} must be a mapping, got {type(raw).__name__}"
            )

        return ConfigLoader.load_from_dict(raw, env)

    @staticmethod
    def load_from_env(env: Optional[Mapping[str, str]] = None) -> BackupSystemConfig:
        """Load configuration from environment variables only."""
        return ConfigLoader.load_from_dict({}, env)

    @staticmethod
    def load_from_dict(
        raw: Dict[str, Any], env: Optional[Mapping[str, str]] = None
    ) -> BackupSystemConfig:
        """Validate a raw configuration mapping after applying environment overrides."""
        merged = apply_env_overrides(raw, os.environ if env is None else env)
        try:
            return BackupSystemConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e


def apply_env_overrides(
    raw: Dict[str, Any], env: Mapping[str, str]
) -> Dict[str, Any]:
    """Return a copy of raw with every set environment override applied."""
    merged = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in raw.items()
    }
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value is None or value == "":
            continue
        if section is None:
            merged[key] = value
        else:
            merged.setdefault(section, {})[key] = value
    return merged
