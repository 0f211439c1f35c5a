"""Configuration management for the local user manager."""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and lookup."""

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / 'config.yaml'

    def __init__(self, config_path: str = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration YAML file. Uses default if not provided.
        """
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        logger.debug("Configuration loaded from: %s", self.config_path)
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Configuration key (e.g., 'session.timeout_minutes')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_storage_config(self) -> Dict[str, Any]:
        """Get storage backend configuration."""
        return self.config.get('storage', {})

    def get_admin_config(self) -> Dict[str, Any]:
        return self.config.get('admin', {})

    def get_session_config(self) -> Dict[str, Any]:
        return self.config.get('session', {})

    def get_export_config(self) -> Dict[str, Any]:
        return self.config.get('export', {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.config.get('logging', {})
