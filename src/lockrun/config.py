"""Configuration management."""

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_NAME = ".lockrun.yaml"
DEFAULT_CONFIG_FILES = [Path.home() / CONFIG_FILE_NAME, Path(CONFIG_FILE_NAME)]
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings from flags, environment and config file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=DEFAULT_CONFIG_FILES,
        extra="ignore",
    )

    # Store
    store_backend: Literal["dynamodb", "redis"] = "dynamodb"

    # DynamoDB
    dynamodb_table: str | None = None
    dynamodb_endpoint: str | None = None
    aws_region: str | None = None

    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "lock:"

    # Lock
    lock_key: str = ""
    lock_timeout: int = 1800  # seconds, stored as expiry only

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def check_backend(self) -> "Settings":
        if self.store_backend == "dynamodb" and not self.dynamodb_table:
            raise ValueError("dynamodb_table is required when store_backend is 'dynamodb'")
        return self

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
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_file: Path | None = None, **overrides) -> Settings:
    """Load settings, optionally from an explicit YAML file.

    Overrides with a value of None are dropped so unset CLI flags fall
    through to the environment and config file.
    """
    values = {name: value for name, value in overrides.items() if value is not None}
    if config_file is None:
        return Settings(**values)

    if not config_file.is_file():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=config_file)

    return FileSettings(**values)
