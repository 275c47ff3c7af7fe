"""
Configuration management for happymath.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import os
import json
import logging
import threading
from typing import Any, Dict, List, Optional
from copy import deepcopy
import yaml

from happymath.math.naming import (
    DEFAULT_INVERTED, DEFAULT_LABELS, DEFAULT_NAME, DEFAULT_SEPARATOR
)

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_FEATURES = [
    'economy_gdp_per_capita',
    'social_support',
    'healthy_life_expectancy',
    'freedom_to_make_life_choices',
    'generosity',
    'perceptions_of_corruption'
]

DEFAULT_TARGET = 'happiness_score'

LOG_LEVELS = ('debug', 'info', 'warn', 'warning', 'error', 'critical')


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_list(value: Any, separator: str = ',') -> Optional[List[str]]:
    """
    Convert a value to a list.

    Args:
        value: Value to convert
        separator: Separator for string values

    Returns:
        List value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        return list(value)

    if isinstance(value, str):
        return [item.strip() for item in value.split(separator) if item.strip()]

    return None


def _env(name: str, convert, current: Any) -> Any:
    """Read an environment variable, keeping the current value if absent or invalid."""
    if name not in os.environ:
        return current

    value = convert(os.environ[name])
    if value is None:
        logger.warning(f"Ignoring invalid value for {name}: {os.environ[name]!r}")
        return current

    return value


class Config:
    """
    Configuration manager for happymath.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            # Start with default configuration
            config = self._get_defaults()

            # Apply environment variables
            config = self._apply_env_vars(config)

            # Apply overrides
            if overrides:
                config = self._apply_overrides(config, overrides)

            self._validate(config)

            # Store configuration
            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # Features mined, clustered and correlated
            'features': list(DEFAULT_FEATURES),
            'target': DEFAULT_TARGET,

            # Record ingestion
            'records': {
                'label-key': 'country_name',
                'partition-key': 'year'
            },

            # Association rules
            'associations': {
                'min-support': 0.3,
                'min-confidence': 0.6
            },

            # Clustering
            'kmeans': {
                'k': 5,
                'max-iter': 100,
                'seed': None        # None draws fresh entropy per run
            },

            # Cluster naming
            'naming': {
                'labels': dict(DEFAULT_LABELS),
                'inverted': list(DEFAULT_INVERTED),
                'separator': DEFAULT_SEPARATOR,
                'default-name': DEFAULT_NAME
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Features
        config['features'] = _env('HAPPY_FEATURES', to_list, config['features'])
        config['target'] = os.environ.get('HAPPY_TARGET', config['target'])

        # Association rules
        config['associations']['min-support'] = _env('HAPPY_MIN_SUPPORT', to_float, config['associations']['min-support'])
        config['associations']['min-confidence'] = _env('HAPPY_MIN_CONFIDENCE', to_float, config['associations']['min-confidence'])

        # Clustering
        config['kmeans']['k'] = _env('HAPPY_K', to_int, config['kmeans']['k'])
        config['kmeans']['max-iter'] = _env('HAPPY_MAX_ITER', to_int, config['kmeans']['max-iter'])
        config['kmeans']['seed'] = _env('HAPPY_SEED', to_int, config['kmeans']['seed'])

        # Naming
        config['naming']['inverted'] = _env('HAPPY_INVERTED_FEATURES', to_list, config['naming']['inverted'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Helper function for deep update
        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = deepcopy(v)
            return d

        # Apply overrides
        return deep_update(config, overrides)

    def _validate(self, config: Dict[str, Any]) -> None:
        """
        Check configuration values that the engine relies on.

        Args:
            config: Configuration to check
        """
        features = config.get('features')
        if not isinstance(features, list) or not features:
            raise ValueError(f"'features' must be a non-empty list, got {features!r}")

        for key in ('min-support', 'min-confidence'):
            value = config['associations'].get(key)
            if not isinstance(value, (int, float)) or not 0 < value <= 1:
                raise ValueError(f"'associations.{key}' must be in (0, 1], got {value!r}")

        k = config['kmeans'].get('k')
        if not isinstance(k, int) or k < 2:
            raise ValueError(f"'kmeans.k' must be an integer >= 2, got {k!r}")

        max_iter = config['kmeans'].get('max-iter')
        if not isinstance(max_iter, int) or max_iter < 1:
            raise ValueError(f"'kmeans.max-iter' must be an integer >= 1, got {max_iter!r}")

        level = config['logging'].get('level')
        if not isinstance(level, str) or level.lower() not in LOG_LEVELS:
            raise ValueError(f"'logging.level' must be one of {LOG_LEVELS}, got {level!r}")

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        # Split path into components
        components = path.split('.')

        # Start with full configuration
        value = self._config

        # Traverse path
        for component in components:
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            # Split path into components
            components = path.split('.')

            # Start with full configuration
            config = self._config

            # Traverse path
            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            # Set value
            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        # Determine file format from extension
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False, allow_unicode=True)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from
        """
        self.load_config(load_config_file(filepath))


def load_config_file(filepath: str) -> Dict[str, Any]:
    """
    Load configuration overrides from a JSON or YAML file.

    Args:
        filepath: Path to configuration file

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f) or {}
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported configuration file format: {filepath}")


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared configuration instance."""
        with cls._lock:
            cls._instance = None
