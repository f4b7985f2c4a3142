"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Virtual Self Companion"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./companion.db"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "virtual-self-companion"

    openai_api_key: str | None = None
    openai_base_url: str | None = None
    ai_text_model: str = "gpt-4o-mini"
    ai_deep_model: str = "gpt-4o"
    ai_image_model: str = "gpt-image-1"
    ai_speech_model: str = "gpt-4o-mini-tts"
    ai_voice_male: str = "onyx"
    ai_voice_default: str = "nova"

    ai_max_attempts: int = 4
    ai_initial_backoff_seconds: float = 2.0
    ai_transient_delay_seconds: float = 0.5
    ai_request_timeout_seconds: float = 60.0
    ai_credential_refresh_enabled: bool = True
    library_context_limit: int = 10

    error_display_seconds: int = 5


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
