"""AI gateway factory."""
from __future__ import annotations

from functools import lru_cache

from companion.core.config import get_settings
from companion.services.ai.client import GenerativeClient
from companion.services.ai.credentials import EnvironmentCredentialSource
from companion.services.ai.gateway import AIGateway, ModelConfig
from companion.services.ai.retry import RetryPolicy


@lru_cache
def get_ai_gateway() -> AIGateway:
    settings = get_settings()
    credentials = EnvironmentCredentialSource(refresh_enabled=settings.ai_credential_refresh_enabled)
    client = GenerativeClient(
        credentials,
        base_url=settings.openai_base_url,
        timeout=settings.ai_request_timeout_seconds,
    )
    models = ModelConfig(
        text_model=settings.ai_text_model,
        deep_model=settings.ai_deep_model,
        image_model=settings.ai_image_model,
        speech_model=settings.ai_speech_model,
        voice_male=settings.ai_voice_male,
        voice_default=settings.ai_voice_default,
        library_context_limit=settings.library_context_limit,
    )
    policy = RetryPolicy.from_settings(settings, refresh_credentials=credentials.refresher)
    return AIGateway(client, policy, models)
