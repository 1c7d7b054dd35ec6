"""Core services for phettest."""

from phettest.core.app_config import AppConfigManager, get_config

__all__ = ["AppConfigManager", "get_config"]
