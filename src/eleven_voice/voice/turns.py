"""Turn-taking state machine coordinating capture, backend round-trip and playback."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from eleven_voice.config import DEFAULT_VOICE_ID
from eleven_voice.exceptions import (
    CaptureError,
    CaptureUnsupported,
    CompletionFailed,
    SynthesisFailed,
    TurnFailed,
    VoiceChatError,
)
from eleven_voice.models import Message, Role, TurnState

from .capture import SpeechCaptureAdapter
from .conversation import ConversationLog
from .interfaces import AudioPlayer, ReplyBackend

T = TypeVar("T")
StateObserver = Callable[["TurnController"], None]

_STARTABLE = frozenset({TurnState.IDLE, TurnState.ERROR})
_IN_FLIGHT = frozenset({TurnState.AWAITING_REPLY, TurnState.SPEAKING})


class TurnController:
    """Owns the turn lifecycle of one voice chat session.

    All methods must be called from the event loop thread. Final transcripts
    that arrive while a turn is in flight are dropped, never queued.
    """

    def __init__(
        self,
        capture: SpeechCaptureAdapter,
        backend: ReplyBackend,
        player: AudioPlayer,
        *,
        conversation: ConversationLog | None = None,
        voice_id: str = DEFAULT_VOICE_ID,
        logger: logging.Logger | None = None,
    ) -> None:
        self._capture = capture
        self._backend = backend
        self._player = player
        self._conversation = conversation if conversation is not None else ConversationLog()
        self._voice_id = voice_id
        self._logger = logger or logging.getLogger("eleven_voice.voice.turns")

        self._state = TurnState.IDLE
        self._transcript = ""
        self._error: VoiceChatError | None = None
        self._pending_capture_error: CaptureError | None = None
        self._turn_task: asyncio.Task[None] | None = None
        self._observers: list[StateObserver] = []

        self._capture.bind(
            on_interim=self.handle_interim,
            on_final=self.handle_final,
            on_error=self.handle_capture_error,
        )
        if self._capture.unsupported is not None:
            self._error = self._capture.unsupported

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def transcript(self) -> str:
        """In-progress interim utterance."""
        return self._transcript

    @property
    def error(self) -> VoiceChatError | None:
        return self._error

    @property
    def conversation(self) -> ConversationLog:
        return self._conversation

    @property
    def busy(self) -> bool:
        return self._state in _IN_FLIGHT

    def subscribe(self, observer: StateObserver) -> None:
        self._observers.append(observer)

    def start(self) -> None:
        """User-initiated start of listening."""
        unsupported = self._capture.unsupported
        if unsupported is not None:
            self._error = unsupported
            self._logger.warning("capture_unsupported", extra={"reason": str(unsupported)})
            self._notify()
            return

        if self._state not in _STARTABLE:
            self._logger.debug("start_ignored", extra={"state": self._state.value})
            return

        self._error = None
        self._transcript = ""
        self._set_state(TurnState.LISTENING)
        try:
            self._capture.start()
        except CaptureUnsupported as exc:
            self._error = exc
            self._set_state(TurnState.IDLE)

    def stop(self) -> None:
        """User-initiated stop of listening. No-op outside ``Listening``."""
        if self._state != TurnState.LISTENING:
            return

        self._capture.stop()
        self._transcript = ""
        self._set_state(TurnState.IDLE)

    def interrupt(self) -> None:
        """Cut the current reply playback short."""
        if self._state == TurnState.SPEAKING:
            self._player.interrupt()

    def handle_interim(self, text: str) -> None:
        if self._state != TurnState.LISTENING:
            return
        self._transcript = text
        self._notify()

    def handle_final(self, text: str) -> asyncio.Task[None] | None:
        """Accept a final transcript and start the reply round-trip."""
        if self._state != TurnState.LISTENING:
            self._logger.info("final_transcript_dropped", extra={"state": self._state.value})
            return None

        content = text.strip()
        self._transcript = ""
        if not content:
            self._notify()
            return None

        self._conversation.append(Message(role=Role.user, content=content))
        self._set_state(TurnState.AWAITING_REPLY)
        self._logger.info("turn_started", extra={"chars": len(content)})
        self._turn_task = asyncio.get_running_loop().create_task(self._complete_turn(content), name="voice-turn")
        return self._turn_task

    def handle_capture_error(self, error: CaptureError) -> None:
        self._logger.warning("capture_failed", extra={"reason": error.reason})
        if self._state in _IN_FLIGHT:
            self._pending_capture_error = error
            return

        self._error = error
        self._transcript = ""
        self._set_state(TurnState.ERROR)

    async def wait_for_turn(self) -> None:
        """Wait until the in-flight round-trip and playback have finished."""
        task = self._turn_task
        if task is not None:
            await task

    async def _complete_turn(self, text: str) -> None:
        try:
            reply = await self._call_backend(CompletionFailed, self._backend.completion(text))
            audio = await self._call_backend(SynthesisFailed, self._backend.synthesize(reply, self._voice_id))
        except TurnFailed as exc:
            self._logger.error("turn_failed", extra={"stage": exc.stage, "status": exc.status, "error": exc.message})
            self._finish_turn(exc)
            return

        self._conversation.append(Message(role=Role.assistant, content=reply))
        self._set_state(TurnState.SPEAKING)
        try:
            await self._player.play(audio)
        except Exception:  # noqa: BLE001 - playback failure ends the turn like a normal stop.
            self._logger.exception("playback_failed")
        self._finish_turn(None)

    @staticmethod
    async def _call_backend(error_cls: type[TurnFailed], call: Awaitable[T]) -> T:
        try:
            return await call
        except TurnFailed:
            raise
        except Exception as exc:  # noqa: BLE001 - any backend failure ends the turn at this stage.
            raise error_cls(f"{type(exc).__name__}: {exc}") from exc

    def _finish_turn(self, failure: TurnFailed | None) -> None:
        self._capture.stop()
        self._turn_task = None
        self._transcript = ""

        error: VoiceChatError | None = failure or self._pending_capture_error
        self._pending_capture_error = None
        if error is not None:
            self._error = error
            self._set_state(TurnState.ERROR)
            return
        self._set_state(TurnState.IDLE)
        self._logger.info("turn_finished", extra={"messages": len(self._conversation)})

    def _set_state(self, state: TurnState) -> None:
        if state != self._state:
            self._logger.debug("turn_state", extra={"from_state": self._state.value, "to_state": state.value})
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)
