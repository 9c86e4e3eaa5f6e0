"""Application configuration module.

This module provides the main application configuration and utilities for
loading it from config files and environment variables. The configuration
is built once at startup and handed to the factories; there is no global
instance.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import Field, ValidationError as PydanticValidationError, field_validator

from ..exceptions import ConfigurationError
from ..models.enums import LanguageTag
from .base import BaseConfig
from .pipeline import AudioSettings, StorageSettings, TimelineSettings
from .tts import EdgeTTSSettings, GoogleTTSSettings, TTSSettings

logger = logging.getLogger(__name__)

# Default configuration file paths
DEFAULT_CONFIG_PATHS = [
    Path("lessonsync.yaml"),
    Path("config/lessonsync.yaml"),
    Path("config/lessonsync.yml"),
    Path("config/lessonsync.json"),
]

DEFAULT_LANGUAGE_CODES = {
    "th": LanguageTag.L1,
    "en": LanguageTag.L2,
}


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from a YAML or JSON file.

    Args:
        file_path: Path to the configuration file.

    Returns:
        Dict containing the configuration.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not YAML/JSON.
    """
    path = Path(file_path).resolve()
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(f) or {}
            elif suffix == '.json':
                data = json.load(f) or {}
            else:
                raise ConfigurationError(f"Unsupported config file format: {suffix}")
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def find_config_file(search_paths: Optional[List[Union[str, Path]]] = None) -> Optional[Path]:
    """Find a configuration file in common locations.

    Returns:
        Path to the first found config file, or None if none found.
    """
    search_paths = search_paths or DEFAULT_CONFIG_PATHS
    for path in search_paths:
        path = Path(path).resolve()
        if path.exists():
            return path
    return None


class AppConfig(BaseConfig):
    """Main application configuration model."""

    tts: TTSSettings = Field(default_factory=TTSSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    timeline: TimelineSettings = Field(default_factory=TimelineSettings)

    # Script language code -> language tag
    language_codes: Dict[str, LanguageTag] = Field(
        default_factory=lambda: dict(DEFAULT_LANGUAGE_CODES)
    )

    @field_validator("language_codes")
    @classmethod
    def normalize_language_codes(cls, v: Dict[str, LanguageTag]) -> Dict[str, LanguageTag]:
        return {code.lower(): tag for code, tag in v.items()}


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> AppConfig:
    """Build the application configuration.

    Args:
        config_file: Path to a YAML or JSON config file. If not provided,
            common locations are searched and defaults are used if none exists.
        **overrides: Top-level values taking precedence over the file.

    Returns:
        The AppConfig instance.

    Raises:
        ConfigurationError: If the file cannot be read or the values are invalid.
    """
    if config_file is None:
        config_file = find_config_file()

    config_data: Dict[str, Any] = {}
    if config_file is not None:
        logger.debug("Loading configuration from %s", config_file)
        config_data = load_config_file(config_file)
    config_data.update(overrides)

    try:
        return AppConfig(**config_data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e


__all__ = [
    'AppConfig',
    'AudioSettings',
    'BaseConfig',
    'EdgeTTSSettings',
    'GoogleTTSSettings',
    'StorageSettings',
    'TimelineSettings',
    'TTSSettings',
    'DEFAULT_LANGUAGE_CODES',
    'find_config_file',
    'load_config',
    'load_config_file',
]
