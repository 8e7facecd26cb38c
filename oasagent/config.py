"""Runtime settings loaded from the environment and config.env."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"


class ConfigError(RuntimeError):
    """Settings are missing or unusable."""


class Settings(BaseSettings):
    api_key: str = Field("", validation_alias="OPENAI_API_KEY")
    base_url: str = Field(DEFAULT_BASE_URL, validation_alias="OPENAI_BASE_URL")
    model: str = Field(DEFAULT_MODEL, validation_alias="OPENAI_MODEL")
    debug: bool = Field(False, validation_alias="DEBUG")
    temperature: float = Field(0.1, validation_alias="OASAGENT_TEMPERATURE")
    max_tool_rounds: int = Field(8, validation_alias="OASAGENT_MAX_TOOL_ROUNDS")
    # Seconds to wait for the next streamed event; None waits forever
    stream_timeout: float | None = Field(None, validation_alias="OASAGENT_STREAM_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )


def get_config_path() -> Path:
    """Determine config file path, respecting OASAGENT_CONFIG env var."""
    config_path = os.environ.get("OASAGENT_CONFIG")
    if config_path:
        return Path(config_path)
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "oasagent" / "config.env"


def load_settings(config_path: Path | None = None) -> Settings:
    """Build settings from the environment, falling back to config.env."""
    path = config_path or get_config_path()
    return Settings(_env_file=path if path.exists() else None)


def require_api_key(settings: Settings) -> None:
    if not settings.api_key:
        raise ConfigError(
            f"No API key configured. Run `oasagent init` or set OPENAI_API_KEY "
            f"(config file: {get_config_path()})"
        )
