"""Error taxonomy shared by the voice client and the backend proxy."""

from __future__ import annotations


class VoiceChatError(Exception):
    """Base error for eleven-voice."""


class CaptureUnsupported(VoiceChatError):
    """The host has no speech recognition capability."""

    def __init__(self, message: str = "Speech recognition not supported on this host.") -> None:
        super().__init__(message)


class CaptureError(VoiceChatError):
    """The recognition engine reported an error mid-session."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Speech recognition error: {reason}")
        self.reason = reason


class TurnFailed(VoiceChatError):
    """A backend call failed while completing a turn."""

    stage = "turn"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        status = f" ({self.status})" if self.status is not None else ""
        return f"{self.stage} failed{status}: {self.message}"


class CompletionFailed(TurnFailed):
    stage = "completion"


class SynthesisFailed(TurnFailed):
    stage = "synthesis"


class PlaybackUnavailable(VoiceChatError):
    """No audio player is available on this host."""


class UpstreamConfigMissing(VoiceChatError):
    """A provider credential or identifier required by the proxy is not configured."""


class UpstreamError(VoiceChatError):
    """A provider API call failed or returned a non-success status."""

    def __init__(self, detail: str, *, status: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status = status
