"""
Configuration Service - YAML config with environment variable overrides
"""
import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def _env_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


class ConfigService:
    """
    Centralized configuration management with environment overrides.

    Priority order:
    1. Environment variables (highest)
    2. YAML config file
    3. Default values (lowest)
    """

    _instance: Optional['ConfigService'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        """Singleton pattern for global config access"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize only once"""
        if not self._config:
            self.reload()

    def reload(self) -> None:
        """Load config from file and environment"""
        self._config = self._merge(self._get_defaults(), self._load_yaml_config())
        self._apply_env_overrides()

    def _config_paths(self) -> List[Path]:
        paths = []
        if env_path := os.environ.get('ZONECLOCK_CONFIG'):
            paths.append(Path(env_path))
        paths.extend([
            Path("/data/config.yaml"),  # Production path
            Path("config/default.yaml"),  # Development path
            Path(__file__).resolve().parent.parent / "config" / "default.yaml",  # Packaged defaults
        ])
        return paths

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load configuration from the first YAML file that exists"""
        for config_path in self._config_paths():
            if config_path.exists():
                try:
                    with open(config_path, 'r') as f:
                        loaded = yaml.safe_load(f) or {}
                    if not isinstance(loaded, dict):
                        logger.warning(f"Ignoring {config_path}: top level is not a mapping")
                        continue
                    logger.debug(f"Loaded configuration from {config_path}")
                    return loaded
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Failed to load {config_path}: {e}")

        return {}

    @classmethod
    def _merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = cls._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        try:
            # API
            if env_url := os.environ.get('ZONECLOCK_API_BASE_URL'):
                self.set('api.base_url', env_url)

            if env_timeout := os.environ.get('ZONECLOCK_HTTP_TIMEOUT'):
                self.set('api.timeout', float(env_timeout))

            # Clock
            if env_tz := os.environ.get('ZONECLOCK_TIMEZONE'):
                self.set('clock.default_timezone', env_tz)

            if env_interval := os.environ.get('ZONECLOCK_UPDATE_INTERVAL_MS'):
                self.set('clock.update_interval_ms', int(env_interval))

            if env_sync := os.environ.get('ZONECLOCK_SYNC_INTERVAL_SECONDS'):
                self.set('clock.sync_interval_seconds', int(env_sync))

            if env_24h := os.environ.get('ZONECLOCK_FORMAT_24H'):
                self.set('clock.format_24h', _env_bool(env_24h))

            if env_seconds := os.environ.get('ZONECLOCK_SHOW_SECONDS'):
                self.set('clock.show_seconds', _env_bool(env_seconds))

            # Preferences, logging, server
            if env_prefs := os.environ.get('ZONECLOCK_PREFERENCES_PATH'):
                self.set('preferences.path', env_prefs)

            if env_level := os.environ.get('ZONECLOCK_LOG_LEVEL'):
                self.set('logging.level', env_level)

            if env_port := os.environ.get('ZONECLOCK_SERVER_PORT'):
                self.set('server.port', int(env_port))
        except ValueError as e:
            raise ConfigError(f"Invalid environment override: {e}") from e

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'api': {
                'base_url': 'http://127.0.0.1:8000/api',
                'timeout': 5.0,
            },
            'clock': {
                'default_timezone': '',
                'update_interval_ms': 1000,
                'sync_interval_seconds': 60,
                'format_24h': False,
                'show_seconds': True,
            },
            'sound': {
                'path': '',
                'volume': 0.45,
            },
            'preferences': {
                'path': '~/.config/zoneclock/preferences.yaml',
            },
            'display': {
                'width': 800,
                'height': 480,
                'fullscreen': False,
            },
            'server': {
                'host': '0.0.0.0',
                'port': 8000,
                'timezones': [],
            },
            'logging': {
                'level': 'INFO',
            },
        }

    def validate(self) -> bool:
        """
        Validate the loaded configuration.

        Returns:
            True if valid

        Raises:
            ConfigError: If configuration is invalid
        """
        base_url = self.get('api.base_url')
        if not isinstance(base_url, str) or not base_url.startswith(('http://', 'https://')):
            raise ConfigError("api.base_url must be an http(s) URL")

        timeout = self.get('api.timeout')
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("api.timeout must be a positive number")

        for key in ('clock.update_interval_ms', 'clock.sync_interval_seconds'):
            value = self.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{key} must be a positive integer")

        for key in ('clock.format_24h', 'clock.show_seconds', 'display.fullscreen'):
            if not isinstance(self.get(key), bool):
                raise ConfigError(f"{key} must be a boolean")

        volume = self.get('sound.volume')
        if isinstance(volume, bool) or not isinstance(volume, (int, float)) or not (0.0 <= volume <= 1.0):
            raise ConfigError("sound.volume must be between 0.0 and 1.0")

        logger.debug("Configuration validation passed")
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation
        Example: config.get('clock.sync_interval_seconds')
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set config value using dot notation
        Example: config.set('clock.format_24h', True)
        """
        keys = key.split('.')
        target = self._config

        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value


# Global instance
config = ConfigService()
