from eleven_voice.models import Message, Role
from eleven_voice.voice.conversation import ConversationLog


def test_log_keeps_append_order() -> None:
    log = ConversationLog()
    log.append(Message(role=Role.user, content="hello"))
    log.append(Message(role=Role.assistant, content="Hi there!"))

    assert [(m.role, m.content) for m in log] == [(Role.user, "hello"), (Role.assistant, "Hi there!")]
    assert log.last().content == "Hi there!"


def test_bounded_log_drops_oldest() -> None:
    log = ConversationLog(max_messages=2)
    for content in ("a", "b", "c"):
        log.append(Message(role=Role.user, content=content))

    assert [m.content for m in log.snapshot()] == ["b", "c"]
    assert len(log) == 2
