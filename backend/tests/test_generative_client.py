"""Tests for the OpenAI adapter using a stand-in SDK client."""
from __future__ import annotations

import base64
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from companion.services.ai.client import GenerativeClient
from companion.services.ai.credentials import EnvironmentCredentialSource, StaticCredentialSource
from companion.services.ai.errors import AuthExpired


class _FakeSDK:
    instances: List["_FakeSDK"] = []

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.requests: List[Dict[str, Any]] = []
        _FakeSDK.instances.append(self)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))
        self.images = SimpleNamespace(generate=self._image)
        self.audio = SimpleNamespace(speech=SimpleNamespace(create=self._speech))

    def _complete(self, **request: Any):
        self.requests.append(request)
        message = SimpleNamespace(content='{"ok": true}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def _image(self, **request: Any):
        self.requests.append(request)
        return SimpleNamespace(data=[SimpleNamespace(b64_json="aW1n")])

    def _speech(self, **request: Any):
        self.requests.append(request)
        return SimpleNamespace(content=b"pcm-bytes")


@pytest.fixture(autouse=True)
def _reset_instances():
    _FakeSDK.instances = []
    yield


def _client(api_key: str | None = "sk-test", **kwargs: Any) -> GenerativeClient:
    return GenerativeClient(StaticCredentialSource(api_key), client_factory=_FakeSDK, timeout=12.5, **kwargs)


def test_text_request_uses_json_mode_and_system_message() -> None:
    text = _client().generate_text(model="m", contents="hi", system_instruction="be kind", json_output=True)

    sdk = _FakeSDK.instances[0]
    assert text == '{"ok": true}'
    assert sdk.kwargs == {"api_key": "sk-test", "timeout": 12.5, "max_retries": 0}
    assert sdk.requests[0]["response_format"] == {"type": "json_object"}
    assert sdk.requests[0]["messages"][0] == {"role": "system", "content": "be kind"}


def test_each_call_builds_a_fresh_sdk_client() -> None:
    client = _client(base_url="http://localhost:8080/v1")

    client.generate_text(model="m", contents="one")
    client.generate_text(model="m", contents="two")

    assert len(_FakeSDK.instances) == 2
    assert _FakeSDK.instances[1].kwargs["base_url"] == "http://localhost:8080/v1"


def test_image_and_speech_outputs() -> None:
    client = _client()

    assert client.generate_image(model="img", prompt="portrait") == "aW1n"
    audio = client.synthesize_speech(model="tts", text="hello", voice="nova")
    assert base64.b64decode(audio) == b"pcm-bytes"


def test_missing_key_raises_auth_expired() -> None:
    with pytest.raises(AuthExpired):
        _client(api_key=None).generate_text(model="m", contents="hi")
    assert _FakeSDK.instances == []


def test_environment_source_refresh_rereads_settings(monkeypatch) -> None:
    from companion.core.config import get_settings

    monkeypatch.setenv("OPENAI_API_KEY", "sk-old")
    get_settings.cache_clear()
    source = EnvironmentCredentialSource()
    assert source.current() == "sk-old"

    monkeypatch.setenv("OPENAI_API_KEY", "sk-new")
    source.refresher()

    assert source.current() == "sk-new"
    get_settings.cache_clear()


def test_refresh_can_be_disabled() -> None:
    assert EnvironmentCredentialSource(refresh_enabled=False).refresher is None
    assert StaticCredentialSource("k").refresher is None
