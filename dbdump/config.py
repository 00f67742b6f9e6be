# dbdump/config.py
"""
Configuration management for output settings.
Supports YAML configuration files whose ``settings`` section overrides the
defaults in :mod:`dbdump.defaults`.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import settings
from .utils import reset_format_cache

logger = logging.getLogger(__name__)

_config_manager = None


class ConfigManager:
    """
    Manage dbdump configuration from YAML files.

    Configuration File Structure
    ----------------------------
    ::

        # dbdump.yml
        settings:
          default_layout: json-object
          null_string_csv: '\\N'
          datetime_format: '%d/%m/%Y %H:%M'
          logging:
            level: DEBUG

    Configuration Locations
    -----------------------
    ConfigManager searches for configuration files in this order:

    1. File specified in config_file parameter
    2. ``./dbdump.yml`` (current directory)
    3. ``./dbdump.yaml`` (current directory)
    4. ``~/.config/dbdump.yml`` (user config directory)
    5. ``~/.config/dbdump.yaml`` (user config directory)

    If no file is found the defaults are used as they are.

    Parameters
    ----------
    config_file : str or Path, optional
        Path to YAML config file. If None, searches standard locations.

    Attributes
    ----------
    config_file : Path or None
        Path to the loaded configuration file
    config : dict
        Parsed configuration dictionary

    Raises
    ------
    FileNotFoundError
        If config_file is given but does not exist
    ValueError
        If the config file is invalid or malformed
    """

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config() if self.config_file else {}
        self._apply_settings()

    def _find_config_file(self, config_file: Optional[str]) -> Optional[Path]:
        """Find the configuration file."""
        if config_file:
            path = Path(config_file)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {config_file}")
            return path

        candidates = [
            Path("dbdump.yml"),
            Path("dbdump.yaml"),
            Path.home() / ".config" / "dbdump.yml",
            Path.home() / ".config" / "dbdump.yaml"
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate

        logger.debug("No config file found, using default settings")
        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load and validate configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to load config file {self.config_file}: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Invalid config file {self.config_file}.")
        if 'settings' in config and not isinstance(config['settings'], dict):
            raise ValueError(f"Invalid config file {self.config_file}: 'settings' must be a dictionary")
        logging_settings = config.get('settings', {}).get('logging')
        if logging_settings is not None and not isinstance(logging_settings, dict):
            raise ValueError(f"Invalid config file {self.config_file}: 'settings.logging' must be a dictionary")

        logger.info(f"Loaded config from {self.config_file}")
        return config

    def _apply_settings(self) -> None:
        """Merge the settings section into the global settings."""
        for key, value in self.config.get('settings', {}).items():
            if isinstance(value, dict) and isinstance(settings.get(key), dict):
                settings[key].update(value)
            else:
                settings[key] = value
        # date formats and null strings may have changed
        reset_format_cache()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value, falling back to the built-in defaults.

        Args:
            key: Setting key (supports dot notation like 'logging.level')
            default: Default value if key not found

        Returns:
            Setting value or default

        Example:
            layout = config.get_setting('default_layout', 'text')
            level = config.get_setting('logging.level')
        """
        value = settings
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set_setting(self, key: str, value: Any) -> None:
        """
        Set a setting value and save config.

        Args:
            key: Setting key (supports dot notation)
            value: Setting value
        """
        current = self.config.setdefault('settings', {})
        keys = key.split('.')
        for k in keys[:-1]:
            current = current.setdefault(k, {})
        current[keys[-1]] = value
        self._save_config()
        self._apply_settings()

    def _save_config(self) -> None:
        """Write the configuration back to its file."""
        if self.config_file is None:
            self.config_file = Path("dbdump.yml")
        with open(self.config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)
        logger.info(f"Saved config to {self.config_file}")


def _get_manager(config_file: Optional[str] = None) -> ConfigManager:
    global _config_manager
    if config_file:
        return ConfigManager(config_file)
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def set_config_file(config_file: str) -> None:
    """Set the configuration file to use globally."""
    global _config_manager
    _config_manager = ConfigManager(config_file)


def get_setting(key: str, default: Any = None, config_file: Optional[str] = None) -> Any:
    """
    Get a setting value from configuration.

    Args:
        key: Setting key (supports dot notation like 'logging.level')
        default: Default value if key not found
        config_file: Optional path to config file

    Returns:
        Setting value or default

    Example:
        layout = get_setting('default_layout')
    """
    return _get_manager(config_file).get_setting(key, default)
