"""Contracts for recognition engines, reply backends and audio playback."""

from __future__ import annotations

from typing import Protocol, Sequence

from eleven_voice.models import RecognitionResult


class RecognitionListener(Protocol):
    """Receives raw events from a continuous recognition engine."""

    def on_result(self, results: Sequence[RecognitionResult], result_index: int) -> None:
        """Handle a result batch; only ``results[result_index:]`` are new."""

    def on_error(self, reason: str) -> None:
        """Handle an engine error."""

    def on_end(self) -> None:
        """Handle the engine ending its stream."""


class RecognitionEngine(Protocol):
    """Continuous, interim-result-enabled speech-to-text stream."""

    def bind(self, listener: RecognitionListener) -> None:
        """Attach the listener that receives engine events."""

    def start(self) -> None:
        """Begin continuous recognition."""

    def stop(self) -> None:
        """End recognition; the engine reports ``on_end`` when done."""


class ReplyBackend(Protocol):
    """Remote completion and synthesis calls used to answer a user turn."""

    async def completion(self, text: str) -> str:
        """Return the language-model reply for ``text``."""

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Return a complete ``audio/mpeg`` payload speaking ``text``."""


class AudioPlayer(Protocol):
    """Plays a complete audio payload."""

    async def play(self, audio_bytes: bytes) -> None:
        """Play until the audio ends or playback is interrupted."""

    def interrupt(self) -> None:
        """Stop the current playback, if any."""
