from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    user = "user"
    assistant = "assistant"


class TurnState(str, Enum):
    """Lifecycle states of a voice chat session."""

    IDLE = "idle"
    LISTENING = "listening"
    AWAITING_REPLY = "awaiting_reply"
    SPEAKING = "speaking"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Message:
    role: Role
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class RecognitionResult:
    """One segment of a recognition engine result batch."""

    transcript: str
    is_final: bool = False
