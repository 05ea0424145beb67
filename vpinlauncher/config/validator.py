"""Configuration validation."""

import logging
from typing import Dict, Any, List

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Configuration validation errors."""
    pass


VALID_ENCODINGS = ['bcd', 'uint']
VALID_ENDIANS = ['be', 'le']


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Problems that only make a feature useless (such as store mapping prefixes
    that can never match) are logged as warnings instead of failing.

    Args:
        config: Configuration dictionary from loader

    Raises:
        ValidationError: If configuration is invalid
    """
    errors = []

    # Validate paths section
    errors.extend(_validate_paths(config.get('paths', {})))

    # Validate snapshots section
    errors.extend(_validate_snapshots(config.get('snapshots', {})))

    # Validate scores section
    errors.extend(_validate_scores(config.get('scores', {})))

    # Validate logging section
    errors.extend(_validate_logging(config.get('logging', {})))

    if errors:
        raise ValidationError(
            "Configuration validation failed:\n  - " + "\n  - ".join(errors)
        )


def _validate_paths(section: Dict[str, Any]) -> List[str]:
    """Validate paths section."""
    errors = []

    if not isinstance(section, dict):
        return ["paths must be a mapping"]

    required_paths = ['emulator', 'tables', 'snapshots', 'nvram']
    for path_key in required_paths:
        value = section.get(path_key)
        if not value:
            errors.append(f"paths.{path_key} is required")
        elif not isinstance(value, str):
            errors.append(f"paths.{path_key} must be a string path")

    return errors


def _validate_snapshots(section: Dict[str, Any]) -> List[str]:
    """Validate snapshot image options."""
    errors = []

    if not isinstance(section, dict):
        return ["snapshots must be a mapping"]

    extension = section.get('extension', '.png')
    if not isinstance(extension, str) or not extension.startswith('.'):
        errors.append("snapshots.extension must be a string starting with '.'")

    popup = section.get('popup_errors', False)
    if not isinstance(popup, bool):
        errors.append("snapshots.popup_errors must be a boolean")

    return errors


def _validate_scores(section: Dict[str, Any]) -> List[str]:
    """Validate store mapping and NVRAM layouts."""
    errors = []

    if section is None:
        return errors
    if not isinstance(section, dict):
        return ["scores must be a mapping"]

    if 'store_mapping' in section and section['store_mapping'] is not None:
        mapping = section['store_mapping']
        if not isinstance(mapping, dict):
            errors.append("scores.store_mapping must be a mapping")
        elif any(
            not isinstance(k, str) or not isinstance(v, str)
            for k, v in mapping.items()
        ):
            errors.append("scores.store_mapping keys and values must be strings")
        else:
            from vpinlauncher.scores.store_mapping import unreachable_prefixes
            for prefix in unreachable_prefixes(mapping):
                logger.warning(
                    f"scores.store_mapping prefix '{prefix}' contains '_' or whitespace "
                    f"and can never match a table title"
                )

    layouts = section.get('layouts', {})
    if layouts is None:
        layouts = {}
    if not isinstance(layouts, dict):
        errors.append("scores.layouts must be a mapping")
        return errors

    for store_id, layout in layouts.items():
        prefix = f"scores.layouts.{store_id}"
        if not isinstance(layout, dict):
            errors.append(f"{prefix} must be a mapping")
            continue

        offset = layout.get('offset')
        if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
            errors.append(f"{prefix}.offset must be a non-negative integer")

        size = layout.get('size')
        if not isinstance(size, int) or isinstance(size, bool) or size < 1:
            errors.append(f"{prefix}.size must be a positive integer")

        encoding = layout.get('encoding', 'bcd')
        if encoding not in VALID_ENCODINGS:
            errors.append(f"{prefix}.encoding must be one of: {', '.join(VALID_ENCODINGS)}")

        endian = layout.get('endian', 'be')
        if endian not in VALID_ENDIANS:
            errors.append(f"{prefix}.endian must be one of: {', '.join(VALID_ENDIANS)}")

    return errors


def _validate_logging(section: Dict[str, Any]) -> List[str]:
    """Validate logging options section."""
    errors = []

    if not isinstance(section, dict):
        return ["logging must be a mapping"]

    # Validate level
    level = section.get('level', 'INFO')
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
    if level not in valid_levels:
        errors.append(f"logging.level must be one of: {', '.join(valid_levels)}")

    # Validate console flag
    console = section.get('console', True)
    if not isinstance(console, bool):
        errors.append("logging.console must be a boolean")

    # Validate optional log file
    if 'file' in section and section['file'] is not None:
        if not isinstance(section['file'], str):
            errors.append("logging.file must be a string path or null")

    return errors
