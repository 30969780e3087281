from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from eleven_voice.exceptions import CompletionFailed, SynthesisFailed
from eleven_voice.voice.backend import HttpReplyBackend


def _backend(handler) -> HttpReplyBackend:
    return HttpReplyBackend("http://proxy.test", transport=httpx.MockTransport(handler))


def test_completion_posts_message_and_returns_reply() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/chat"
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"reply": "Hi there!"})

    reply = asyncio.run(_backend(handler).completion("hello"))

    assert reply == "Hi there!"
    assert seen == [{"message": "hello"}]


def test_completion_failure_carries_status_and_proxy_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Groq API error: Internal Server Error"})

    with pytest.raises(CompletionFailed) as excinfo:
        asyncio.run(_backend(handler).completion("hello"))

    assert excinfo.value.status == 500
    assert "Groq API error" in excinfo.value.message


def test_completion_transport_error_is_completion_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CompletionFailed, match="unreachable"):
        asyncio.run(_backend(handler).completion("hello"))


def test_synthesize_returns_audio_bytes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/elevenlabs/text-to-speech"
        assert json.loads(request.content) == {"text": "Hi there!", "voiceId": "voice-1"}
        return httpx.Response(200, content=b"ID3-audio", headers={"Content-Type": "audio/mpeg"})

    audio = asyncio.run(_backend(handler).synthesize("Hi there!", "voice-1"))

    assert audio == b"ID3-audio"


def test_synthesize_failure_is_synthesis_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "ElevenLabs API error: Unauthorized"})

    with pytest.raises(SynthesisFailed) as excinfo:
        asyncio.run(_backend(handler).synthesize("Hi", "voice-1"))

    assert excinfo.value.stage == "synthesis"
    assert excinfo.value.status == 500


def test_fetch_config_returns_agent_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/config"
        return httpx.Response(200, json={"agentId": "agent-1"})

    assert asyncio.run(_backend(handler).fetch_config()) == {"agentId": "agent-1"}


def test_signed_url_returns_proxy_value() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/agent/signed-url"
        return httpx.Response(200, json={"signedUrl": "wss://signed.example/abc"})

    assert asyncio.run(_backend(handler).signed_url()) == "wss://signed.example/abc"


def test_signed_url_error_status_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Agent ID not configured"})

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_backend(handler).signed_url())
