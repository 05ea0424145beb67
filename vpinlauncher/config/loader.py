"""Configuration loading and parsing."""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional


class ConfigError(Exception):
    """Configuration-related errors."""
    pass


# Optional sections merged under the user's config
DEFAULT_CONFIG: Dict[str, Any] = {
    'snapshots': {
        'extension': '.png',
        'popup_errors': False,
    },
    'scores': {
        'layouts': {},
    },
    'logging': {
        'level': 'INFO',
        'console': True,
        'file': None,
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and parse configuration file.

    Args:
        config_path: Path to config.yaml file. If None, searches current directory.

    Returns:
        Parsed configuration dictionary with defaults applied

    Raises:
        ConfigError: If config file cannot be loaded or parsed
    """
    # Determine config file path
    if config_path is None:
        config_path = Path.cwd() / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}\n"
            f"Copy config.yaml.example to config.yaml and configure it."
        )

    # Load YAML
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")
    except Exception as e:
        raise ConfigError(f"Failed to read config file: {e}")

    if not isinstance(config, dict):
        raise ConfigError("Configuration file must contain a YAML dictionary")

    return apply_defaults(config)


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in optional sections without overriding user values.

    Args:
        config: Parsed configuration dictionary

    Returns:
        New dictionary with DEFAULT_CONFIG merged underneath
    """
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in config.items():
        # A section left with only commented-out children loads as None
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., 'paths.tables')
        default: Default value if path not found

    Returns:
        Configuration value or default

    Example:
        >>> get_config_value(config, 'snapshots.extension')
        '.png'
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def require_path(config: Dict[str, Any], key: str) -> Path:
    """
    Resolve a required entry from the paths section.

    Raises:
        ConfigError: If the entry is missing or empty
    """
    value = get_config_value(config, f'paths.{key}')
    if not value:
        raise ConfigError(f"paths.{key} is required")
    return Path(str(value)).expanduser()
