"""FastAPI application exposing the chat and speech relay endpoints."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from eleven_voice.config import DEFAULT_VOICE_ID, Settings, settings as default_settings
from eleven_voice.exceptions import UpstreamConfigMissing, UpstreamError

from .upstream import GROQ_KEY_MISSING, ElevenLabsClient, GroqChatClient

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str


class TextToSpeechRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    voice_id: str = Field(default=DEFAULT_VOICE_ID, alias="voiceId")


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the proxy app. ``transport`` replaces the network for upstream calls."""
    settings = settings or default_settings

    chat_client = GroqChatClient(
        settings.groq_api_key,
        model=settings.groq_model,
        system_prompt=settings.groq_system_prompt,
        temperature=settings.groq_temperature,
        max_tokens=settings.groq_max_tokens,
        base_url=settings.groq_base_url,
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )
    elevenlabs = ElevenLabsClient(
        settings.elevenlabs_api_key,
        tts_model=settings.elevenlabs_tts_model,
        base_url=settings.elevenlabs_base_url,
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )

    app = FastAPI(title=settings.app_name)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(UpstreamConfigMissing)
    async def _config_missing(request: Request, exc: UpstreamConfigMissing) -> JSONResponse:
        logger.warning("upstream_config_missing", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(UpstreamError)
    async def _upstream_failed(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error(
            "upstream_failed",
            extra={"path": request.url.path, "status": exc.status, "error": exc.detail},
        )
        return JSONResponse(status_code=500, content={"error": exc.detail})

    @app.get("/api/config")
    async def get_config() -> dict:
        return {"agentId": settings.elevenlabs_agent_id}

    @app.post("/api/agent/signed-url")
    async def agent_signed_url() -> dict:
        signed_url = await elevenlabs.signed_url(settings.elevenlabs_agent_id)
        return {"signedUrl": signed_url}

    def require_groq_key() -> None:
        # Resolved before the body: a missing key answers 400 even for an invalid body.
        if not settings.groq_api_key:
            raise UpstreamConfigMissing(GROQ_KEY_MISSING)

    @app.post("/api/chat", dependencies=[Depends(require_groq_key)])
    async def chat(request: ChatRequest) -> dict:
        reply = await chat_client.complete(request.message)
        logger.info("chat_completed", extra={"chars_in": len(request.message), "chars_out": len(reply)})
        return {"reply": reply}

    @app.post("/api/elevenlabs/text-to-speech")
    async def text_to_speech(request: TextToSpeechRequest) -> Response:
        audio = await elevenlabs.text_to_speech(request.text, request.voice_id)
        logger.info("speech_synthesized", extra={"voice_id": request.voice_id, "bytes": len(audio)})
        return Response(content=audio, media_type="audio/mpeg")

    if settings.serve_static and settings.static_dir:
        _mount_frontend(app, Path(settings.static_dir))

    return app


def _mount_frontend(app: FastAPI, static_dir: Path) -> None:
    """Serve a built single-page frontend, falling back to ``index.html``."""
    root = static_dir.resolve()
    index = root / "index.html"

    @app.get("/{path:path}", include_in_schema=False)
    async def frontend(path: str) -> FileResponse:
        if path.startswith("api/"):
            raise HTTPException(status_code=404)
        candidate = (root / path).resolve()
        if path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        if not index.is_file():
            raise HTTPException(status_code=404)
        return FileResponse(index)
