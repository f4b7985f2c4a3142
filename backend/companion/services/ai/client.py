"""Thin adapter over the OpenAI SDK used by the AI gateway."""
from __future__ import annotations

import base64
from typing import Any, Callable, Dict, List, Optional

import openai

from companion.services.ai.credentials import CredentialSource
from companion.services.ai.errors import AuthExpired


class GenerativeClient:
    """
    Text, image and speech generation against an OpenAI-compatible endpoint.

    A new SDK client is built for every call from the credential source's current
    key, so a rotated key is picked up by the very next attempt. SDK-level retries are
    disabled because RetryPolicy owns retry decisions.
    """

    def __init__(
        self,
        credentials: CredentialSource,
        *,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        client_factory: Callable[..., Any] = openai.OpenAI,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url
        self.timeout = timeout
        self._client_factory = client_factory

    def _build(self):
        api_key = self.credentials.current()
        if not api_key:
            raise AuthExpired("No API key configured for the AI service")
        kwargs: Dict[str, Any] = {"api_key": api_key, "timeout": self.timeout, "max_retries": 0}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return self._client_factory(**kwargs)

    def generate_text(
        self,
        *,
        model: str,
        contents: str,
        system_instruction: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        client = self._build()
        messages: List[Dict[str, str]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": contents})

        request: Dict[str, Any] = {"model": model, "messages": messages}
        if json_output:
            request["response_format"] = {"type": "json_object"}
        completion = client.chat.completions.create(**request)
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def generate_image(self, *, model: str, prompt: str, size: str = "1024x1024") -> Optional[str]:
        """Return the generated image as base64-encoded PNG, or None if nothing came back."""
        client = self._build()
        response = client.images.generate(model=model, prompt=prompt, size=size, n=1)
        if not response.data:
            return None
        return response.data[0].b64_json

    def synthesize_speech(self, *, model: str, text: str, voice: str, audio_format: str = "pcm") -> str:
        """Return synthesized audio as a base64 string (empty if the service sent nothing)."""
        client = self._build()
        response = client.audio.speech.create(model=model, voice=voice, input=text, response_format=audio_format)
        audio = response.content or b""
        return base64.b64encode(audio).decode("ascii")
