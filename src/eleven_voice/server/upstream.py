"""Provider API clients used by the backend proxy."""

from __future__ import annotations

import logging

import httpx

from eleven_voice.exceptions import UpstreamConfigMissing, UpstreamError

logger = logging.getLogger(__name__)

GROQ_KEY_MISSING = "Groq API key not configured. Please add GROQ_API_KEY to .env file."


class GroqChatClient:
    """Single-turn chat completion against Groq's OpenAI-compatible API."""

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        system_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 150,
        base_url: str = "https://api.groq.com/openai/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._system_prompt = system_prompt
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def complete(self, message: str) -> str:
        if not self._api_key:
            raise UpstreamConfigMissing(GROQ_KEY_MISSING)

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": message},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=payload,
                )
            except httpx.HTTPError as exc:
                raise UpstreamError(f"Groq API unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("groq_api_error", extra={"status": response.status_code, "body": response.text})
            raise UpstreamError(f"Groq API error: {response.reason_phrase}", status=response.status_code)

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError(f"Unexpected Groq response: {exc}") from exc


class ElevenLabsClient:
    """Text-to-speech and conversational agent endpoints of ElevenLabs."""

    def __init__(
        self,
        api_key: str | None,
        *,
        tts_model: str = "eleven_monolingual_v1",
        base_url: str = "https://api.elevenlabs.io/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._tts_model = tts_model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {"xi-api-key": self._api_key} if self._api_key else {}

    async def text_to_speech(self, text: str, voice_id: str) -> bytes:
        if not self._api_key:
            raise UpstreamError("ElevenLabs API key not configured")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/text-to-speech/{voice_id}",
                    headers=self._headers(),
                    json={"text": text, "model_id": self._tts_model},
                )
            except httpx.HTTPError as exc:
                raise UpstreamError(f"ElevenLabs API unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("elevenlabs_tts_error", extra={"status": response.status_code, "body": response.text})
            raise UpstreamError(f"ElevenLabs API error: {response.reason_phrase}", status=response.status_code)
        return response.content

    async def signed_url(self, agent_id: str | None) -> str:
        if not agent_id:
            raise UpstreamConfigMissing("Agent ID not configured")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self._base_url}/convai/conversation/get_signed_url",
                    params={"agent_id": agent_id},
                    headers=self._headers(),
                )
            except httpx.HTTPError as exc:
                raise UpstreamError(f"ElevenLabs API unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("elevenlabs_signed_url_error", extra={"status": response.status_code, "body": response.text})
            raise UpstreamError(f"Failed to get signed URL: {response.reason_phrase}", status=response.status_code)

        try:
            return response.json()["signed_url"]
        except (ValueError, KeyError, TypeError) as exc:
            raise UpstreamError(f"Unexpected ElevenLabs response: {exc}") from exc
