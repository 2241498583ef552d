"""Configuration manager - defaults, file overrides and environment interpolation."""
import copy
import json
import os
from typing import Any, Dict, Optional

from handlerkit.config.defaults import DEFAULT_CONFIG
from handlerkit.config.schemas import HandlerKitConfig, validate_config
from handlerkit.domain.base.exceptions import ConfigurationError

CONFIG_FILE_ENV = "HANDLERKIT_CONFIG_FILE"


class ConfigurationManager:
    """
    Manages handlerkit configuration with defaults and overrides.

    This class handles:
    - Loading default configuration
    - Applying a JSON configuration file
    - Applying explicit overrides
    - ``${VAR:default}`` environment interpolation
    - Validation through the pydantic schemas
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize configuration manager with defaults.

        Args:
            config_file: Optional path to a JSON configuration file. If not
                provided, HANDLERKIT_CONFIG_FILE is used when set.
            overrides: Optional dictionary merged last
        """
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        config_file = config_file or os.environ.get(CONFIG_FILE_ENV)
        if config_file:
            self._load_config_file(config_file)

        if overrides:
            self.update_config(overrides)

        self._validated: Optional[HandlerKitConfig] = None

    def _load_config_file(self, config_path: str) -> None:
        """Load configuration from file."""
        try:
            with open(config_path, "r") as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a JSON object")
        self.update_config(user_config)

    @staticmethod
    def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                ConfigurationManager._deep_update(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    def _interpolate_values(self, config: Any) -> Any:
        """Interpolate variables in configuration values."""
        if isinstance(config, str):
            if config.startswith("${") and config.endswith("}"):
                var_name = config[2:-1]
                if ":" in var_name:
                    var_name, default = var_name.split(":", 1)
                    return os.environ.get(var_name, default)
                return os.environ.get(var_name, config)
            return config
        elif isinstance(config, dict):
            return {k: self._interpolate_values(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._interpolate_values(v) for v in config]
        return config

    def update_config(self, user_config: Dict[str, Any]) -> None:
        """
        Update configuration with user-provided values.

        Args:
            user_config: Configuration dictionary
        """
        self._deep_update(self._config, user_config)
        self._validated = None

    def get_raw_config(self) -> Dict[str, Any]:
        """Complete configuration dictionary with interpolations applied."""
        return self._interpolate_values(self._config)

    def get_config(self) -> HandlerKitConfig:
        """
        Get the validated configuration.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if self._validated is None:
            self._validated = validate_config(self.get_raw_config())
        return self._validated
