"""Append-only conversation log for display."""

from __future__ import annotations

from collections import deque
from typing import Iterator

from eleven_voice.models import Message


class ConversationLog:
    """Ordered messages exchanged in one session.

    ``max_messages`` bounds the log; the oldest messages are dropped first.
    """

    def __init__(self, max_messages: int | None = None) -> None:
        self._messages: deque[Message] = deque(maxlen=max_messages)

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
