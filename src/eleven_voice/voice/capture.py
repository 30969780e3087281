"""Continuous speech capture normalized into interim and final transcripts."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from eleven_voice.exceptions import CaptureError, CaptureUnsupported
from eleven_voice.models import RecognitionResult

from .interfaces import RecognitionEngine

TranscriptCallback = Callable[[str], None]
ErrorCallback = Callable[[CaptureError], None]


def partition_results(results: Sequence[RecognitionResult], result_index: int = 0) -> tuple[str | None, str]:
    """Split the new part of a result batch into finalized and interim text.

    Returns ``(final_text, interim_text)``. ``final_text`` is ``None`` when the
    batch holds no finalized segment, otherwise the trimmed concatenation of
    the finalized segments in order.
    """
    final_parts: list[str] = []
    interim = ""
    has_final = False
    for result in results[max(0, result_index) :]:
        if result.is_final:
            has_final = True
            final_parts.append(result.transcript + " ")
        else:
            interim += result.transcript

    if not has_final:
        return None, interim
    return "".join(final_parts).strip(), interim


class SpeechCaptureAdapter:
    """Wraps a recognition engine and emits ``on_interim``/``on_final`` callbacks.

    The engine may end its stream on its own (idle timeouts and the like).
    While the caller still wants to listen, the adapter restarts it right away.
    """

    def __init__(
        self,
        engine: RecognitionEngine | None,
        *,
        unsupported: CaptureUnsupported | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._unsupported = unsupported
        if engine is None and unsupported is None:
            self._unsupported = CaptureUnsupported()
        self._logger = logger or logging.getLogger("eleven_voice.voice.capture")

        self._desired_listening = False
        self._running = False
        self._restarts = 0

        self._on_interim: TranscriptCallback | None = None
        self._on_final: TranscriptCallback | None = None
        self._on_error: ErrorCallback | None = None

        if self._engine is not None:
            self._engine.bind(self)

    @classmethod
    def from_factory(cls, factory: Callable[[], RecognitionEngine], **kwargs) -> SpeechCaptureAdapter:
        """Build an adapter, recording ``CaptureUnsupported`` instead of raising it."""
        try:
            engine = factory()
        except CaptureUnsupported as exc:
            return cls(None, unsupported=exc, **kwargs)
        return cls(engine, **kwargs)

    @property
    def unsupported(self) -> CaptureUnsupported | None:
        return self._unsupported

    @property
    def listening(self) -> bool:
        return self._desired_listening

    @property
    def restarts(self) -> int:
        """Number of automatic restarts performed since construction."""
        return self._restarts

    def bind(
        self,
        *,
        on_interim: TranscriptCallback,
        on_final: TranscriptCallback,
        on_error: ErrorCallback,
    ) -> None:
        self._on_interim = on_interim
        self._on_final = on_final
        self._on_error = on_error

    def start(self) -> None:
        """Begin continuous listening."""
        if self._unsupported is not None:
            raise self._unsupported
        if self._desired_listening:
            return

        self._desired_listening = True
        if self._start_engine():
            self._logger.info("capture_started")

    def stop(self) -> None:
        """End listening. Safe to call repeatedly."""
        if not self._desired_listening and not self._running:
            return

        self._desired_listening = False
        self._running = False
        if self._engine is not None:
            self._engine.stop()
        self._logger.info("capture_stopped")

    def on_result(self, results: Sequence[RecognitionResult], result_index: int) -> None:
        final_text, interim_text = partition_results(results, result_index)
        if final_text is not None:
            if self._on_final is not None:
                self._on_final(final_text)
        elif self._on_interim is not None:
            self._on_interim(interim_text)

    def on_error(self, reason: str) -> None:
        self._logger.warning("capture_error", extra={"reason": reason})
        self.stop()
        if self._on_error is not None:
            self._on_error(CaptureError(reason))

    def on_end(self) -> None:
        self._running = False
        if not self._desired_listening:
            return

        self._restarts += 1
        self._logger.debug("capture_restarted", extra={"restarts": self._restarts})
        self._start_engine()

    def _start_engine(self) -> bool:
        assert self._engine is not None
        self._running = True
        try:
            self._engine.start()
        except (OSError, RuntimeError) as exc:
            self.on_error(f"{type(exc).__name__}: {exc}")
            return False
        return True
