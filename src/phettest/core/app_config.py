"""Configuration management for phettest."""

import os
from pathlib import Path
from typing import Any, cast

import yaml

from phettest.models.app_config import AppConfig


class AppConfigManager:
    """Manages application configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses PHETTEST_CONFIG_PATH
                        environment variable or defaults to ~/.config/phettest/config.yaml
        """
        if config_path is None:
            env_path = os.getenv("PHETTEST_CONFIG_PATH")
            if env_path:
                config_path = Path(env_path).expanduser()
            else:
                config_path = Path.home() / ".config" / "phettest" / "config.yaml"

        self.config_path = config_path
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load configuration from file and apply environment variable overrides.

        A missing file is not an error; defaults apply and nothing is written.

        Returns:
            Loaded configuration
        """
        config_data: dict[str, Any] = {}

        # 1. Load from YAML file if it exists
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # 2. Create config object (applies defaults)
        config = AppConfig(**config_data)

        # 3. Apply environment variable overrides
        config = self._apply_env_overrides(config)

        return config

    def save(self, config: AppConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self._config_to_dict(config)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        """Convert config to dictionary with Path objects as strings."""
        config_dict = config.model_dump(mode="json", exclude_none=True)
        return cast(dict[str, Any], config_dict)

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        """Apply environment variable overrides.

        Environment variables use the format: PHETTEST_<SECTION>_<KEY>
        Examples:
            - PHETTEST_SERVER_PORT=9000
            - PHETTEST_ROOT_DIR=~/phetsims

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        # Server overrides
        if port := os.getenv("PHETTEST_SERVER_PORT"):
            config.server.port = int(port)
        if host := os.getenv("PHETTEST_SERVER_HOST"):
            config.server.host = host

        # Path overrides
        if root_dir := os.getenv("PHETTEST_ROOT_DIR"):
            config.paths.root_dir = Path(root_dir).expanduser()

        # Advanced overrides
        if log_level := os.getenv("PHETTEST_ADVANCED_LOG_LEVEL"):
            if log_level in ("WARNING", "INFO", "DEBUG"):
                config.advanced.log_level = log_level  # type: ignore

        return config

    def get_config(self) -> AppConfig:
        """Get configuration (singleton pattern).

        Returns:
            Current configuration
        """
        if self._config is None:
            self._config = self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Reload configuration from file.

        Returns:
            Reloaded configuration
        """
        self._config = self.load()
        return self._config


# Global configuration manager instance
_config_manager = AppConfigManager()


def get_config() -> AppConfig:
    """Get global application configuration.

    Returns:
        Application configuration
    """
    return _config_manager.get_config()
