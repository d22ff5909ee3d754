"""
Utility Functions for the precalculation pipeline.

Functions:
    read_config_from_file: Load a YAML configuration file.
    update_nested_dict: Recursively merge two dictionaries.
    utc_timestamp: ISO-8601 UTC timestamp for generated documents.
    format_duration: Human-readable duration for summaries.
"""

import datetime
import os
from typing import Any, Dict

import yaml

from dcprecalc.errors import ConfigurationError, ErrorCode


def read_config_from_file(config_path: str) -> Dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Dictionary containing the parsed YAML configuration (empty for an
        empty file).

    Raises:
        ConfigurationError: If the file doesn't exist, is not valid YAML or
            does not hold a mapping at the top level.
    """
    if not os.path.isfile(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}",
                                 parameter="config_file", code=ErrorCode.CONFIG_FILE_NOT_FOUND)

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse configuration file: {config_path}",
                                 parameter="config_file", actual=str(e),
                                 code=ErrorCode.CONFIG_PARSE_ERROR) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}",
                                 parameter="config_file", expected="mapping",
                                 actual=type(config).__name__, code=ErrorCode.CONFIG_PARSE_ERROR)
    return config


def update_nested_dict(
    original_dict: Dict[str, Any],
    update_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Recursively merge two nested dictionaries.

    Values from update_dict override values in original_dict. Nested
    dictionaries are merged recursively rather than replaced.

    Example:
        >>> update_nested_dict({'a': 1, 'b': {'c': 2, 'd': 3}}, {'b': {'c': 4}})
        {'a': 1, 'b': {'c': 4, 'd': 3}}
    """
    updated_dict: Dict[str, Any] = {}
    for key, value in original_dict.items():
        if key in update_dict:
            if isinstance(value, dict) and isinstance(update_dict[key], dict):
                updated_dict[key] = update_nested_dict(value, update_dict[key])
            else:
                updated_dict[key] = update_dict[key]
        else:
            updated_dict[key] = value
    for key, value in update_dict.items():
        if key not in original_dict:
            updated_dict[key] = value
    return updated_dict


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with millisecond precision.

    Example:
        >>> utc_timestamp()
        '2011-03-03T12:00:00.000Z'
    """
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{seconds / 60:.2f} minutes"
