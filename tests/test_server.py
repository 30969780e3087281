from __future__ import annotations

import json

import httpx
import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from eleven_voice.config import DEFAULT_VOICE_ID, Settings
from eleven_voice.server import create_app


class FakeProviders:
    """Records upstream requests and answers like Groq and ElevenLabs."""

    def __init__(self, *, status: int = 200) -> None:
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, text="upstream exploded")
        if request.url.host == "api.groq.com":
            return httpx.Response(200, json={"choices": [{"message": {"content": "Hi there!"}}]})
        if request.url.path.endswith("/get_signed_url"):
            return httpx.Response(200, json={"signed_url": "wss://signed.example/abc"})
        return httpx.Response(200, content=b"ID3-audio", headers={"Content-Type": "audio/mpeg"})


def _settings(**overrides) -> Settings:
    values = {
        "groq_api_key": "groq-key",
        "elevenlabs_api_key": "xi-key",
        "elevenlabs_agent_id": "agent-1",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


def _client(providers: FakeProviders, **overrides) -> TestClient:
    return TestClient(create_app(_settings(**overrides), transport=httpx.MockTransport(providers)))


def test_config_exposes_agent_id_only() -> None:
    response = _client(FakeProviders()).get("/api/config")

    assert response.status_code == 200
    assert response.json() == {"agentId": "agent-1"}


def test_chat_relays_message_to_groq() -> None:
    providers = FakeProviders()

    response = _client(providers).post("/api/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json() == {"reply": "Hi there!"}
    upstream = providers.requests[0]
    body = json.loads(upstream.content)
    assert upstream.headers["Authorization"] == "Bearer groq-key"
    assert body["model"] == "llama-3.1-70b-versatile"
    assert body["messages"][0]["role"] == "system"
    assert body["messages"][1] == {"role": "user", "content": "hello"}
    assert body["max_tokens"] == 150


def test_chat_without_groq_key_is_400() -> None:
    providers = FakeProviders()

    response = _client(providers, groq_api_key=None).post("/api/chat", json={"message": "hello"})

    assert response.status_code == 400
    assert "GROQ_API_KEY" in response.json()["error"]
    assert providers.requests == []


def test_chat_without_groq_key_is_400_even_without_message() -> None:
    providers = FakeProviders()

    response = _client(providers, groq_api_key=None).post("/api/chat", json={})

    assert response.status_code == 400
    assert "GROQ_API_KEY" in response.json()["error"]
    assert providers.requests == []


def test_chat_with_key_but_without_message_is_validation_error() -> None:
    response = _client(FakeProviders()).post("/api/chat", json={})

    assert response.status_code == 422


def test_chat_upstream_failure_is_500() -> None:
    response = _client(FakeProviders(status=500)).post("/api/chat", json={"message": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "Groq API error: Internal Server Error"}


def test_text_to_speech_returns_mpeg_bytes_with_default_voice() -> None:
    providers = FakeProviders()

    response = _client(providers).post("/api/elevenlabs/text-to-speech", json={"text": "Hi there!"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3-audio"
    upstream = providers.requests[0]
    assert upstream.url.path == f"/v1/text-to-speech/{DEFAULT_VOICE_ID}"
    assert upstream.headers["xi-api-key"] == "xi-key"
    assert json.loads(upstream.content) == {"text": "Hi there!", "model_id": "eleven_monolingual_v1"}


def test_text_to_speech_uses_requested_voice() -> None:
    providers = FakeProviders()

    _client(providers).post("/api/elevenlabs/text-to-speech", json={"text": "Hi", "voiceId": "voice-9"})

    assert providers.requests[0].url.path == "/v1/text-to-speech/voice-9"


def test_text_to_speech_upstream_failure_is_500() -> None:
    response = _client(FakeProviders(status=401)).post("/api/elevenlabs/text-to-speech", json={"text": "Hi"})

    assert response.status_code == 500
    assert "ElevenLabs API error" in response.json()["error"]


def test_signed_url_requires_agent_id() -> None:
    response = _client(FakeProviders(), elevenlabs_agent_id=None).post("/api/agent/signed-url")

    assert response.status_code == 400
    assert response.json() == {"error": "Agent ID not configured"}


def test_signed_url_relays_upstream_value() -> None:
    providers = FakeProviders()

    response = _client(providers).post("/api/agent/signed-url")

    assert response.status_code == 200
    assert response.json() == {"signedUrl": "wss://signed.example/abc"}
    assert providers.requests[0].url.params["agent_id"] == "agent-1"


def test_static_frontend_falls_back_to_index(tmp_path) -> None:
    (tmp_path / "index.html").write_text("<html>voice</html>", encoding="utf-8")
    (tmp_path / "app.js").write_text("console.log('hi')", encoding="utf-8")
    client = _client(FakeProviders(), serve_static=True, static_dir=str(tmp_path))

    assert client.get("/app.js").text == "console.log('hi')"
    assert "voice" in client.get("/conversation/42").text
    assert client.get("/api/config").json() == {"agentId": "agent-1"}
