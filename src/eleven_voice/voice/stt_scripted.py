"""Recognition engine that replays queued result batches."""

from __future__ import annotations

from collections import deque
from typing import Sequence

from eleven_voice.models import RecognitionResult

from .interfaces import RecognitionEngine, RecognitionListener


class ScriptedRecognitionEngine(RecognitionEngine):
    """Feeds typed or pre-recorded transcripts through the capture pipeline.

    Queued batches are delivered on ``start()`` (or immediately when already
    running). ``end()`` simulates the engine closing its stream.
    """

    def __init__(self) -> None:
        self._listener: RecognitionListener | None = None
        self._pending: deque[tuple[list[RecognitionResult], int]] = deque()
        self._running = False
        self.start_calls = 0
        self.stop_calls = 0

    @property
    def running(self) -> bool:
        return self._running

    def bind(self, listener: RecognitionListener) -> None:
        self._listener = listener

    def start(self) -> None:
        self.start_calls += 1
        self._running = True
        self._flush()

    def stop(self) -> None:
        self.stop_calls += 1
        self._running = False

    def push(self, results: Sequence[RecognitionResult], result_index: int = 0) -> None:
        self._pending.append((list(results), result_index))
        if self._running:
            self._flush()

    def push_interim(self, text: str) -> None:
        self.push([RecognitionResult(transcript=text, is_final=False)])

    def push_final(self, text: str) -> None:
        self.push([RecognitionResult(transcript=text, is_final=True)])

    def fail(self, reason: str) -> None:
        if self._listener is not None:
            self._listener.on_error(reason)

    def end(self) -> None:
        self._running = False
        if self._listener is not None:
            self._listener.on_end()

    def _flush(self) -> None:
        while self._pending and self._running and self._listener is not None:
            results, result_index = self._pending.popleft()
            self._listener.on_result(results, result_index)
