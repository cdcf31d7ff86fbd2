import logging
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Startup configuration is missing or invalid."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(default="")
    app_name: str = "Users API"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    sql_echo: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {v!r}")
        return level


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Read settings from the environment (and ``env_file`` if present).

    Raises:
        ConfigError: if ``DATABASE_URL`` is absent or blank, or a value
            cannot be parsed.
    """
    try:
        settings = Settings(_env_file=env_file)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    if not settings.database_url.strip():
        raise ConfigError("DATABASE_URL environment variable is not set")

    return settings
