"""CLI startup entrypoint for eleven-voice."""

from __future__ import annotations

import asyncio

import typer
from rich import print
from rich.console import Console
from rich.markup import escape

from eleven_voice.config import settings
from eleven_voice.exceptions import PlaybackUnavailable
from eleven_voice.models import Role, TurnState
from eleven_voice.telemetry.logging import configure_logging
from eleven_voice.voice import (
    ConversationLog,
    HttpReplyBackend,
    ScriptedRecognitionEngine,
    SilentAudioPlayer,
    SpeechCaptureAdapter,
    SubprocessAudioPlayer,
    TurnController,
    find_player_command,
)
from eleven_voice.voice.interfaces import AudioPlayer

app = typer.Typer(help="Voice chat client and Groq/ElevenLabs backend proxy")

_QUIT_WORDS = {"q", "quit", "exit"}


class _ConsoleRenderer:
    """Prints controller state changes, interim transcripts and new messages."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._state: TurnState | None = None
        self._transcript = ""
        self._printed = 0
        self._error: str | None = None

    def __call__(self, controller: TurnController) -> None:
        messages = controller.conversation.snapshot()
        for message in messages[self._printed :]:
            speaker = "You" if message.role == Role.user else "Assistant"
            style = "bold cyan" if message.role == Role.user else "bold green"
            stamp = message.timestamp.astimezone().strftime("%H:%M:%S")
            self._console.print(f"[{style}]{speaker}[/] [dim]{stamp}[/] {escape(message.content)}")
        self._printed = len(messages)

        if controller.transcript and controller.transcript != self._transcript:
            self._console.print(f"[dim]... {escape(controller.transcript)}[/]")
        self._transcript = controller.transcript

        error = str(controller.error) if controller.error else None
        if error and error != self._error:
            self._console.print(f"[bold red]{escape(error)}[/]")
        self._error = error

        if controller.state != self._state:
            self._state = controller.state
            self._console.print(f"[dim]<{controller.state.value}>[/]")


def _build_player(no_audio: bool) -> AudioPlayer:
    if no_audio:
        return SilentAudioPlayer()
    return SubprocessAudioPlayer(find_player_command(settings.audio_player))


def _build_controller(capture: SpeechCaptureAdapter, player: AudioPlayer, voice_id: str | None, backend_url: str | None):
    return TurnController(
        capture,
        HttpReplyBackend(backend_url or settings.backend_url),
        player,
        conversation=ConversationLog(max_messages=settings.max_log_messages),
        voice_id=voice_id or settings.voice_id,
    )


@app.command("show-config")
def show_config() -> None:
    """Show runtime configuration without secrets."""
    print(
        {
            "app_name": settings.app_name,
            "host": settings.host,
            "port": settings.port,
            "backend_url": settings.backend_url,
            "voice_id": settings.voice_id,
            "groq_model": settings.groq_model,
            "groq_configured": bool(settings.groq_api_key),
            "elevenlabs_configured": bool(settings.elevenlabs_api_key),
            "elevenlabs_agent_id": settings.elevenlabs_agent_id,
            "serve_static": settings.serve_static,
        }
    )


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (defaults to settings)"),
    port: int = typer.Option(None, help="Bind port (defaults to settings)"),
) -> None:
    """Run the backend proxy."""
    import uvicorn

    from eleven_voice.server import create_app

    configure_logging(settings.log_level)
    bind_host = host or settings.host
    bind_port = port or settings.port
    print({"server": f"http://{bind_host}:{bind_port}", "api": f"http://{bind_host}:{bind_port}/api"})
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port, log_level=settings.log_level.lower())


@app.command()
def say(
    text: str,
    voice_id: str = typer.Option(None, help="ElevenLabs voice id"),
    backend_url: str = typer.Option(None, help="Backend proxy base URL"),
    no_audio: bool = typer.Option(False, help="Skip audio playback"),
) -> None:
    """Run one turn with typed text instead of the microphone."""
    configure_logging(settings.log_level)
    try:
        player = _build_player(no_audio)
    except PlaybackUnavailable as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)

    async def _run() -> TurnController:
        engine = ScriptedRecognitionEngine()
        engine.push_final(text)
        controller = _build_controller(SpeechCaptureAdapter(engine), player, voice_id, backend_url)
        controller.subscribe(_ConsoleRenderer(Console()))
        controller.start()
        await controller.wait_for_turn()
        return controller

    controller = asyncio.run(_run())
    if controller.state == TurnState.ERROR:
        raise typer.Exit(code=1)


@app.command("voice-chat")
def voice_chat(
    hands_free: bool = typer.Option(False, help="Resume listening automatically after each reply"),
    voice_id: str = typer.Option(None, help="ElevenLabs voice id"),
    backend_url: str = typer.Option(None, help="Backend proxy base URL"),
    no_audio: bool = typer.Option(False, help="Skip audio playback"),
    language: str = typer.Option("en-US", help="Recognition language"),
) -> None:
    """Run an interactive microphone session against the backend proxy."""
    configure_logging(settings.log_level)

    async def _run() -> int:
        from eleven_voice.voice.stt_speechrecognition import SpeechRecognitionEngine

        loop = asyncio.get_running_loop()
        capture = await asyncio.to_thread(
            SpeechCaptureAdapter.from_factory,
            lambda: SpeechRecognitionEngine(loop=loop, language=language),
        )
        if capture.unsupported is not None:
            print({"error": str(capture.unsupported)})
            return 1

        try:
            player = _build_player(no_audio)
        except PlaybackUnavailable as exc:
            print({"error": str(exc)})
            return 1

        console = Console()
        controller = _build_controller(capture, player, voice_id, backend_url)
        controller.subscribe(_ConsoleRenderer(console))
        if hands_free:
            controller.subscribe(_resume_after_reply(loop))

        print(
            {
                "voice_chat": "started",
                "backend_url": backend_url or settings.backend_url,
                "hint": "Press Enter to start or stop listening, 'i' + Enter to interrupt a reply, 'q' to quit.",
            }
        )
        while True:
            command = (await asyncio.to_thread(input)).strip().lower()
            if command in _QUIT_WORDS:
                break
            if command == "i":
                controller.interrupt()
            elif controller.state == TurnState.LISTENING:
                controller.stop()
            elif controller.busy:
                console.print("[yellow]Still answering; wait for the reply to finish.[/]")
            else:
                controller.start()

        controller.stop()
        controller.interrupt()
        await controller.wait_for_turn()
        print({"voice_chat": "stopped", "messages": len(controller.conversation)})
        return 0

    code = asyncio.run(_run())
    if code:
        raise typer.Exit(code=code)


def _resume_after_reply(loop: asyncio.AbstractEventLoop):
    previous: list[TurnState] = [TurnState.IDLE]

    def _observer(controller: TurnController) -> None:
        if previous[0] == TurnState.SPEAKING and controller.state == TurnState.IDLE:
            loop.call_soon(controller.start)
        previous[0] = controller.state

    return _observer


if __name__ == "__main__":
    app()
