"""Configuration management for skyform.

This module handles YAML configuration loading, in-memory configuration
mappings and environment variable override support. The resulting
configuration is a read-only view: the bootstrap sequence only ever
reads the region and profile from it.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import yaml

from .errors import ConfigError


ENVIRONMENT_OVERRIDES = {
    "AWS_REGION": "aws.region",
    "AWS_PROFILE": "aws.profile",
}


class Configuration:
    """Read-only configuration view with YAML loading and validation.

    This class handles loading configuration from YAML files or plain
    mappings, validating the structure, and supporting environment
    variable overrides for the AWS region and profile.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize configuration from a YAML file.

        Args:
            config_path: Optional path to configuration file.
                        If None, auto-detects config.yaml in current directory.

        Raises:
            ConfigError: When configuration file is missing or invalid
        """
        self._config_path = self._resolve_config_path(config_path)
        self._config: Dict[str, Any] = self._load_configuration()
        self._apply_environment_overrides()
        self._validate_configuration()

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], apply_environment: bool = False
    ) -> "Configuration":
        """Build configuration from an in-memory mapping.

        Flat dotted keys such as ``{"aws.region": "eu-west-1"}`` are
        expanded into nested sections.

        Args:
            data: Configuration mapping, nested or with dotted keys
            apply_environment: Whether AWS_REGION/AWS_PROFILE override values

        Returns:
            Configuration instance

        Raises:
            ConfigError: When configuration structure is invalid
        """
        config = cls.__new__(cls)
        config._config_path = None
        config._config = {}
        for key, value in data.items():
            if isinstance(value, Mapping) and "." not in key:
                for sub_key, sub_value in value.items():
                    config._set_nested_value(f"{key}.{sub_key}", sub_value)
            else:
                config._set_nested_value(key, value)
        if apply_environment:
            config._apply_environment_overrides()
        config._validate_configuration()
        return config

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Resolved Path object to configuration file

        Raises:
            ConfigError: When configuration file not found
        """
        if config_path:
            path = Path(config_path)
        else:
            path = Path("config.yaml")
            if not path.exists():
                path = Path("config/settings.yaml")

        if not path.exists():
            raise ConfigError(
                f"Configuration file not found: {path}. "
                "Please create a configuration file or specify a valid path."
            )

        return path

    def _load_configuration(self) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Raises:
            ConfigError: When YAML file is invalid
        """
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML in configuration file {self._config_path}: {e}"
            )
        except IOError as e:
            raise ConfigError(
                f"Unable to read configuration file {self._config_path}: {e}"
            )

        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration file {self._config_path} must contain a mapping"
            )
        return data

    def _validate_configuration(self) -> None:
        """Validate configuration field types.

        A missing region is not an error here: the bootstrap sequence
        reports it with guidance on how to set it.

        Raises:
            ConfigError: When fields have the wrong type
        """
        aws_config = self._config.get("aws", {})
        if not isinstance(aws_config, dict):
            raise ConfigError("Configuration section 'aws' must be a mapping")

        for field in ("region", "profile"):
            value = aws_config.get(field)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"Field 'aws.{field}' must be a string")

    def _apply_environment_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        for variable, key_path in ENVIRONMENT_OVERRIDES.items():
            if os.environ.get(variable):
                self._set_nested_value(key_path, os.environ[variable])

    def _set_nested_value(self, key_path: str, value: Any) -> None:
        """Set nested configuration value using dot notation.

        Only used while the configuration is being built.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            value: Value to set
        """
        keys = key_path.split(".")
        current = self._config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def region(self) -> str:
        """Get AWS region, empty string when unset."""
        return self.get("aws.region") or ""

    def profile(self) -> str:
        """Get AWS profile name, empty string for the default profile."""
        return self.get("aws.profile") or ""

    @property
    def config_path(self) -> Optional[Path]:
        """Path the configuration was loaded from, if any."""
        return self._config_path

    def to_dict(self) -> Dict[str, Any]:
        """Get complete configuration as dictionary.

        Returns:
            Deep copy of the configuration dictionary
        """
        return _deep_copy(self._config)


def _deep_copy(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: _deep_copy(value) if isinstance(value, dict) else value
        for key, value in data.items()
    }
