"""Settings loading and validation."""

import logging
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, available_timezones

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import ORDER_DEFAULT, SETTINGS_ENV_PREFIX, SUBMIT_ERROR_MESSAGE
from .errors import ConfigException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Form engine settings."""

    order_default: float = Field(default=ORDER_DEFAULT)
    files_supported: bool = True
    submit_error_message: str = Field(default=SUBMIT_ERROR_MESSAGE, min_length=1)
    timezone: str = Field(default="UTC")
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix=SETTINGS_ENV_PREFIX,
        env_nested_delimiter="__",
    )

    @field_validator("timezone", mode="before")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in available_timezones():
            raise ValueError(
                f"Invalid timezone configuration: '{v}'. "
                "Please use a valid IANA timezone identifier"
            )
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, settings_path: str) -> "Settings":
        """Load settings from specified path."""
        path = Path(settings_path)
        if not path.exists():
            raise ConfigException(f"Settings file not found: {settings_path}")

        class _Settings(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix=SETTINGS_ENV_PREFIX,
                env_nested_delimiter="__",
            )

        try:
            settings = _Settings()
        except ValidationError as e:
            error_lines = ["Settings validation failed:"]
            for error in e.errors():
                loc = " -> ".join(str(item) for item in error["loc"])
                error_lines.append(f"  - {loc}: {error['msg']}")
            raise ConfigException("\n".join(error_lines)) from e
        except ValueError as e:
            raise ConfigException(f"Invalid settings file {settings_path}: {e}") from e

        logger.debug(f"Loaded settings from {path}")
        return settings

    def get_timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
