"""Simple YAML configuration loader for audiocatalog."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "audiocatalog.yaml"

DEFAULTS: Dict[str, Any] = {
    "storage": {
        "data_directory": "data",
    },
    "server": {
        "base_url": "http://localhost:8080",
        "auth_token": None,
        "timeout_seconds": 300,
    },
    "upload": {
        "chunk_size": 64 * 1024,
        "progress_buffer": 128,
    },
    "workers": {
        "io_threads": 2,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/audiocatalog.log",
        "console_output": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class CatalogConfig:
    """audiocatalog configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses audiocatalog.yaml
                        in the current directory.
        """
        self.config_file = Path(config_path or DEFAULT_CONFIG_FILENAME)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any], base_dir: Optional[str] = None) -> "CatalogConfig":
        """Build a configuration from an in-memory mapping (paths resolve against ``base_dir``)."""
        instance = cls.__new__(cls)
        instance.config_file = Path(base_dir or os.getcwd()) / DEFAULT_CONFIG_FILENAME
        instance.config = _merge(DEFAULTS, mapping or {})
        instance._resolve_paths(instance.config)
        return instance

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)

            if not config:
                raise ValueError("Configuration file is empty")
            if not isinstance(config, dict):
                raise ValueError("Configuration root must be a mapping")

            config = _merge(DEFAULTS, config)

            # Resolve relative paths
            self._resolve_paths(config)

            logger.info("Configuration loaded successfully")
            return config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except ValueError:
            raise
        except Exception as e:
            raise ValueError(f"Failed to load configuration: {e}")

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve data directory
        if 'storage' in config and config['storage'].get('data_directory'):
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        # Resolve log file path
        if 'logging' in config and config['logging'].get('file_path'):
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'server.base_url').

        Args:
            key_path: Dot-separated key path (e.g., 'upload.chunk_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'server.auth_token')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_server_url(self) -> str:
        """Get server base URL - CRASHES if not configured."""
        base_url = self.get('server.base_url')
        if not base_url:
            raise ValueError("Server base_url not configured in audiocatalog.yaml")
        return str(base_url)
