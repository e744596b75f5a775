"""Configuration settings for mediaagent."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or overrides."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, populate_by_name=True
    )

    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL"
    )
    openai_model: str = Field(default="gpt-4.1-mini", validation_alias="OPENAI_MODEL")
    openai_timeout_seconds: int = Field(
        default=60, validation_alias="OPENAI_TIMEOUT_SECONDS"
    )
    openai_extra_headers: str | None = Field(
        default=None, validation_alias="OPENAI_EXTRA_HEADERS"
    )
    command_timeout_seconds: float = Field(
        default=300.0, validation_alias="MEDIAAGENT_COMMAND_TIMEOUT_SECONDS"
    )
    scrub_secrets: bool = Field(default=True, validation_alias="MEDIAAGENT_SCRUB_SECRETS")
    public_root: str = Field(default="public", validation_alias="MEDIAAGENT_PUBLIC_ROOT")
    generated_root: str = Field(
        default="public/generated", validation_alias="MEDIAAGENT_GENERATED_ROOT"
    )
    session_input_root: str = Field(
        default="storage/inputs", validation_alias="MEDIAAGENT_SESSION_INPUT_ROOT"
    )
    tool_definitions: str | None = Field(
        default=None, validation_alias="MEDIAAGENT_TOOL_DEFINITIONS"
    )
    host: str = Field(default="127.0.0.1", validation_alias="MEDIAAGENT_HOST")
    port: int = Field(default=3001, validation_alias="MEDIAAGENT_PORT")


DEFAULT_SETTINGS = Settings()
