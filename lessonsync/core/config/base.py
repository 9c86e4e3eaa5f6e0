"""Base configuration model for LessonSync."""
from __future__ import annotations

from typing import Tuple, Type

from pydantic import field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration model with common settings.

    Settings are read from keyword arguments (usually a YAML or JSON config
    file), a ``.env`` file and ``LESSONSYNC_`` environment variables. Nested
    sections use ``__`` as delimiter, e.g. ``LESSONSYNC_TTS__PROVIDER=google``.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="LESSONSYNC_",
        extra="ignore",
        validate_default=True,
    )

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_dateformat: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for configuration values."""
        # Order of precedence:
        # 1. Environment variables
        # 2. .env file
        # 3. init_settings (config file and explicit overrides)
        # 4. file_secret_settings
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level
