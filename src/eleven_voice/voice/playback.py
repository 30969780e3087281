"""Audio playback for synthesized replies."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import tempfile
from typing import Sequence

from eleven_voice.exceptions import PlaybackUnavailable

from .interfaces import AudioPlayer

_KNOWN_PLAYERS: tuple[tuple[str, ...], ...] = (
    ("ffplay", "-nodisp", "-autoexit", "-hide_banner", "-loglevel", "error"),
    ("mpg123", "-q"),
    ("mpv", "--no-video", "--really-quiet"),
    ("afplay",),
)


def find_player_command(explicit: str | None = None) -> list[str]:
    """Resolve the command used to play an mp3 file (the path is appended)."""
    if explicit:
        command = shlex.split(explicit)
        if not command or shutil.which(command[0]) is None:
            raise PlaybackUnavailable(f"Audio player not found: {explicit}")
        return command

    for candidate in _KNOWN_PLAYERS:
        if shutil.which(candidate[0]):
            return list(candidate)
    names = ", ".join(candidate[0] for candidate in _KNOWN_PLAYERS)
    raise PlaybackUnavailable(f"No audio player found. Install one of: {names}, or pass --no-audio.")


class SubprocessAudioPlayer(AudioPlayer):
    """Plays a complete mp3 payload with an external player process.

    An ``interrupt()`` arriving before the process has spawned is remembered
    and applied as soon as it exists.
    """

    def __init__(self, command: Sequence[str] | None = None, *, logger: logging.Logger | None = None) -> None:
        self._command = list(command) if command else find_player_command()
        self._process: asyncio.subprocess.Process | None = None
        self._playing = False
        self._interrupt_pending = False
        self._logger = logger or logging.getLogger("eleven_voice.voice.playback")

    @property
    def command(self) -> list[str]:
        return list(self._command)

    async def play(self, audio_bytes: bytes) -> None:
        if not audio_bytes:
            return

        self._playing = True
        self._interrupt_pending = False
        fd, path = tempfile.mkstemp(prefix="eleven-voice-", suffix=".mp3")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(audio_bytes)

            self._process = await asyncio.create_subprocess_exec(
                *self._command,
                path,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            self._logger.debug("playback_started", extra={"player": self._command[0], "bytes": len(audio_bytes)})
            if self._interrupt_pending:
                self._terminate(self._process)
            returncode = await self._process.wait()
            self._logger.debug("playback_finished", extra={"returncode": returncode})
        finally:
            self._process = None
            self._playing = False
            self._interrupt_pending = False
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass

    def interrupt(self) -> None:
        if not self._playing:
            return
        self._interrupt_pending = True
        if self._process is not None:
            self._terminate(self._process)

    def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        self._logger.info("playback_interrupted")


class SilentAudioPlayer(AudioPlayer):
    """Discards audio; keeps the last payload for inspection."""

    def __init__(self) -> None:
        self.played: list[bytes] = []

    async def play(self, audio_bytes: bytes) -> None:
        self.played.append(audio_bytes)

    def interrupt(self) -> None:
        return None
