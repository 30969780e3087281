from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

from eleven_voice.exceptions import PlaybackUnavailable
from eleven_voice.voice.playback import SubprocessAudioPlayer, find_player_command


def test_player_receives_payload_file_and_removes_it(tmp_path: Path) -> None:
    copy = tmp_path / "copy.mp3"
    seen_path = tmp_path / "seen.txt"
    script = (
        "import pathlib, shutil, sys; "
        f"shutil.copy(sys.argv[1], {str(copy)!r}); "
        f"pathlib.Path({str(seen_path)!r}).write_text(sys.argv[1])"
    )
    player = SubprocessAudioPlayer([sys.executable, "-c", script])

    asyncio.run(player.play(b"ID3-audio"))

    played_path = Path(seen_path.read_text())
    assert copy.read_bytes() == b"ID3-audio"
    assert played_path.suffix == ".mp3"
    assert not played_path.exists()


def test_interrupt_stops_long_playback() -> None:
    player = SubprocessAudioPlayer([sys.executable, "-c", "import time; time.sleep(30)"])

    async def _run() -> float:
        started = time.monotonic()
        task = asyncio.create_task(player.play(b"ID3"))
        while player._process is None:
            await asyncio.sleep(0.01)
        player.interrupt()
        await asyncio.wait_for(task, timeout=10)
        return time.monotonic() - started

    assert asyncio.run(_run()) < 10


def test_missing_explicit_player_is_reported() -> None:
    with pytest.raises(PlaybackUnavailable):
        find_player_command("definitely-not-an-audio-player-xyz")


def test_interrupt_before_player_process_exists_still_stops_it(monkeypatch) -> None:
    player = SubprocessAudioPlayer([sys.executable, "-c", "import time; time.sleep(30)"])
    spawn = asyncio.create_subprocess_exec

    async def _spawn_after_interrupt(*args, **kwargs):
        player.interrupt()
        return await spawn(*args, **kwargs)

    monkeypatch.setattr(asyncio, "create_subprocess_exec", _spawn_after_interrupt)

    async def _run() -> float:
        started = time.monotonic()
        await asyncio.wait_for(player.play(b"ID3"), timeout=10)
        return time.monotonic() - started

    assert asyncio.run(_run()) < 10
    assert player._process is None


def test_interrupt_when_idle_does_not_affect_next_playback(tmp_path: Path) -> None:
    marker = tmp_path / "done.txt"
    player = SubprocessAudioPlayer(
        [sys.executable, "-c", f"import pathlib; pathlib.Path({str(marker)!r}).write_text('ok')"]
    )

    player.interrupt()
    asyncio.run(player.play(b"ID3"))

    assert marker.read_text() == "ok"
