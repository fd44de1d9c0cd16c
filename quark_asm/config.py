"""
Configuration Module

Parses and validates YAML configuration files for the assembler CLI and the
inspection server.
"""

import yaml
from typing import Any

from .decoder import HEX_BYTE_ORDERS


DEFAULT_CONFIG = {
    'hex_byte_order': 'reversed',
    'diagnostics': False,
    'max_upload_bytes': 16 * 1024 * 1024,
}


class ConfigError(Exception):
    """Raised when a configuration file is invalid."""
    pass


def parse_config(yaml_content: str) -> dict:
    """
    Parse and validate a YAML configuration.

    Args:
        yaml_content: Raw YAML string content

    Returns:
        Configuration dictionary with defaults filled in

    Raises:
        ConfigError: If the configuration is invalid
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    # An empty document means "all defaults"
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML mapping/dictionary")

    _validate_config(data)

    config = dict(DEFAULT_CONFIG)
    config.update(data)
    return config


def load_config(path: str | None) -> dict:
    """Load a configuration file, or return the defaults when path is None."""
    if path is None:
        return dict(DEFAULT_CONFIG)
    try:
        with open(path, 'r') as f:
            return parse_config(f.read())
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror}")


def _validate_config(data: dict) -> None:
    """Validate configuration keys and value types."""
    for key in data:
        if key not in DEFAULT_CONFIG:
            raise ConfigError(f"Unknown configuration key '{key}'")

    if 'hex_byte_order' in data and data['hex_byte_order'] not in HEX_BYTE_ORDERS:
        raise ConfigError(
            f"'hex_byte_order' must be one of {', '.join(HEX_BYTE_ORDERS)}, "
            f"got '{data['hex_byte_order']}'"
        )

    if 'diagnostics' in data and not isinstance(data['diagnostics'], bool):
        raise ConfigError("'diagnostics' must be true or false")

    if 'max_upload_bytes' in data:
        _validate_positive_int(data['max_upload_bytes'], 'max_upload_bytes')


def _validate_positive_int(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{name}' must be a positive integer")


def get_config_summary(config: dict) -> dict:
    """Get a summary of the active configuration for display."""
    return {
        'hex_byte_order': config['hex_byte_order'],
        'diagnostics': config['diagnostics'],
        'max_upload_mb': round(config['max_upload_bytes'] / (1024 * 1024), 2),
    }
