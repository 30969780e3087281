"""Microphone recognition engine powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from eleven_voice.exceptions import CaptureUnsupported
from eleven_voice.models import RecognitionResult

from .interfaces import RecognitionEngine, RecognitionListener

_INSTALL_HINT = "Install extras with: pip install 'eleven-voice[voice]'"


class SpeechRecognitionEngine(RecognitionEngine):
    """Continuous listening on the default microphone.

    ``speech_recognition`` runs its listener on a background thread. Every event
    is posted to ``loop`` so the capture adapter and the turn controller only
    ever run on the event loop thread.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        language: str = "en-US",
        phrase_time_limit: float | None = 10.0,
        adjust_noise_seconds: float = 0.5,
        sample_rate: int = 16_000,
        chunk_size: int = 1024,
        logger: logging.Logger | None = None,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise CaptureUnsupported(f"Speech recognition backend unavailable. {_INSTALL_HINT}") from exc

        try:
            microphone = sr.Microphone(sample_rate=sample_rate, chunk_size=chunk_size)
        except (AttributeError, OSError) as exc:
            # AttributeError: PyAudio missing. OSError: no input device.
            raise CaptureUnsupported(f"No microphone available ({exc}). {_INSTALL_HINT}") from exc

        recognizer = sr.Recognizer()
        if adjust_noise_seconds > 0:
            try:
                with microphone as source:
                    recognizer.adjust_for_ambient_noise(source, duration=adjust_noise_seconds)
            except OSError as exc:
                raise CaptureUnsupported(f"Microphone could not be opened ({exc}).") from exc

        self._sr = sr
        self._recognizer = recognizer
        self._microphone = microphone
        self._loop = loop
        self._language = language
        self._phrase_time_limit = phrase_time_limit
        self._logger = logger or logging.getLogger("eleven_voice.voice.stt_speechrecognition")

        self._listener: RecognitionListener | None = None
        self._stopper: Callable[..., None] | None = None

    def bind(self, listener: RecognitionListener) -> None:
        self._listener = listener

    def start(self) -> None:
        if self._stopper is not None:
            return

        self._stopper = self._recognizer.listen_in_background(
            self._microphone,
            self._on_audio,
            phrase_time_limit=self._phrase_time_limit,
        )
        self._logger.debug("microphone_listening", extra={"language": self._language})

    def stop(self) -> None:
        stopper, self._stopper = self._stopper, None
        if stopper is None:
            return
        stopper(wait_for_stop=False)
        self._dispatch(self._emit_end)

    def _on_audio(self, recognizer, audio) -> None:
        """Runs on the background listener thread for every captured phrase."""
        try:
            text = recognizer.recognize_google(audio, language=self._language)
        except self._sr.UnknownValueError:
            return
        except self._sr.RequestError as exc:
            self._dispatch(self._emit_error, f"network: {exc}")
            return

        if text:
            self._dispatch(self._emit_result, [RecognitionResult(transcript=text, is_final=True)])

    def _dispatch(self, callback: Callable[..., None], *args) -> None:
        if self._loop is None:
            callback(*args)
            return
        self._loop.call_soon_threadsafe(callback, *args)

    def _emit_result(self, results: list[RecognitionResult]) -> None:
        if self._listener is not None:
            self._listener.on_result(results, 0)

    def _emit_error(self, reason: str) -> None:
        if self._listener is not None:
            self._listener.on_error(reason)

    def _emit_end(self) -> None:
        if self._listener is not None:
            self._listener.on_end()
