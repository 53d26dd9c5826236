"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    groq_api_key: str | None = None
    inference_base_url: str = "https://api.groq.com/openai/v1"
    text_model: str = "llama-3.3-70b-versatile"
    vision_models: list[str] = Field(
        default_factory=lambda: [
            "meta-llama/llama-4-scout-17b-16e-instruct",
            "meta-llama/llama-4-maverick-17b-128e-instruct",
        ]
    )
    vision_attempts_per_model: int = 2
    vision_retry_delay_seconds: float = 0.5
    transcription_model: str = "whisper-large-v3-turbo"
    transcription_language: str = "es"
    text_timeout_seconds: float = 30.0
    vision_timeout_seconds: float = 60.0
    transcription_timeout_seconds: float = 30.0
    temperature: float = 0.3
    max_tokens: int = 1000
    image_max_edge: int = 800
    image_max_bytes: int = 180 * 1024
    image_initial_quality: int = 60
    image_quality_step: int = 10
    image_min_quality: int = 15
    image_high_res_pixels: int = 5_000_000
    image_high_res_scale: float = 0.4
    image_upload_limit_bytes: int = 100 * 1024 * 1024
    heic_conversion_quality: int = 70
    audio_max_bytes: int = 25 * 1024 * 1024
    locale: str = "es"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_credential(default: str | None, override: str | None) -> str | None:
    """Pick the per-request credential override, falling back to the default."""
    for candidate in (override, default):
        if candidate is None:
            continue
        cleaned = candidate.strip()
        if cleaned:
            return cleaned
    return None
