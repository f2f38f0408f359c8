"""Application settings loaded from the environment and ``.env``."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from card_mailer.template import (
    DEFAULT_SENDER_NAMES,
    INITIAL_EVENT_NAME,
    INITIAL_SENDER_NAME,
)

MAX_IMAGE_BYTES = 5 * 1024 * 1024


class Settings(BaseSettings):
    """Runtime configuration for the card mailer."""

    model_config = SettingsConfigDict(
        env_prefix="CARD_MAILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    extractor: str = Field(
        default="openrouter:google/gemini-2.5-flash",
        description="Extractor backend as <backend>:<model>",
    )
    openrouter_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OPENROUTER_API_KEY", "openrouter_groq-gptoss_key"
        ),
    )
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout: float | None = Field(
        default=None, description="Seconds before giving up on the provider, None waits"
    )
    max_image_bytes: int = Field(default=MAX_IMAGE_BYTES, gt=0)
    sender_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SENDER_NAMES)
    )
    default_sender: str = INITIAL_SENDER_NAME
    default_event: str = INITIAL_EVENT_NAME


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
