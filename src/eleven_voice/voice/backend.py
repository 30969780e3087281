"""HTTP client for the backend proxy."""

from __future__ import annotations

import logging

import httpx

from eleven_voice.config import DEFAULT_VOICE_ID
from eleven_voice.exceptions import CompletionFailed, SynthesisFailed, TurnFailed

from .interfaces import ReplyBackend


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return response.reason_phrase or str(payload)


class HttpReplyBackend(ReplyBackend):
    """Calls ``/api/chat`` and ``/api/elevenlabs/text-to-speech`` on the proxy.

    Neither call is retried; failures raise ``CompletionFailed`` or
    ``SynthesisFailed``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._logger = logger or logging.getLogger("eleven_voice.voice.backend")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout, transport=self._transport)

    async def completion(self, text: str) -> str:
        response = await self._post("/api/chat", {"message": text}, CompletionFailed)
        try:
            reply = response.json()["reply"]
        except (ValueError, KeyError, TypeError) as exc:
            raise CompletionFailed(f"Malformed chat response: {exc}", status=response.status_code) from exc
        return str(reply)

    async def synthesize(self, text: str, voice_id: str = DEFAULT_VOICE_ID) -> bytes:
        response = await self._post(
            "/api/elevenlabs/text-to-speech",
            {"text": text, "voiceId": voice_id},
            SynthesisFailed,
        )
        if not response.content:
            raise SynthesisFailed("Empty audio payload", status=response.status_code)
        return response.content

    async def fetch_config(self) -> dict:
        async with self._client() as client:
            response = await client.get("/api/config")
            response.raise_for_status()
            return response.json()

    async def signed_url(self) -> str:
        async with self._client() as client:
            response = await client.post("/api/agent/signed-url")
            response.raise_for_status()
            return response.json()["signedUrl"]

    async def _post(self, path: str, payload: dict, error_cls: type[TurnFailed]) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.post(path, json=payload)
        except httpx.HTTPError as exc:
            self._logger.warning("backend_unreachable", extra={"path": path, "error": str(exc)})
            raise error_cls(f"Backend unreachable at {self._base_url}: {exc}") from exc

        if response.is_success:
            return response

        message = _error_message(response)
        self._logger.warning(
            "backend_call_failed",
            extra={"path": path, "status": response.status_code, "error": message},
        )
        raise error_cls(message, status=response.status_code)
