"""Tests for the transcript store."""

from datetime import datetime

from debate_client.models import Message
from debate_client.transcript import TranscriptStore
from debate_client.types import MessageType, Speaker


def make_message(msg_id: str, speaker: Speaker, content: str, round_number: int, kind: MessageType) -> Message:
    return Message(
        id=msg_id,
        speaker=speaker,
        role=speaker.value,
        content=content,
        round=round_number,
        message_type=kind,
        timestamp=datetime(2024, 5, 1, 14, 30, 0),
    )


def test_duplicate_ids_are_rejected() -> None:
    store = TranscriptStore()
    message = make_message("ai-1", Speaker.NEGATIVE, "Point", 1, MessageType.ARGUMENT)

    assert store.append(message) is True
    assert store.append(message) is False
    assert len(store) == 1


def test_filters_and_order() -> None:
    store = TranscriptStore()
    store.append(make_message("a", Speaker.MODERATOR, "Welcome", 0, MessageType.ANNOUNCEMENT))
    store.append(make_message("b", Speaker.AFFIRMATIVE, "Yes", 1, MessageType.ARGUMENT))
    store.append(make_message("c", Speaker.NEGATIVE, "No", 1, MessageType.ARGUMENT))

    assert [m.id for m in store] == ["a", "b", "c"]
    assert [m.id for m in store.arguments()] == ["b", "c"]
    assert [m.id for m in store.by_speaker(Speaker.NEGATIVE)] == ["c"]

    store.clear()
    assert store.messages == []
    assert store.append(make_message("a", Speaker.MODERATOR, "Again", 0, MessageType.ANNOUNCEMENT))


def test_format_transcript_groups_by_round() -> None:
    store = TranscriptStore()
    store.append(make_message("a", Speaker.MODERATOR, "Welcome all", 0, MessageType.ANNOUNCEMENT))
    store.append(make_message("b", Speaker.AFFIRMATIVE, "AI helps people", 1, MessageType.ARGUMENT))

    text = store.format_transcript("AI regulation")

    assert text.startswith("DEBATE TRANSCRIPT\nTopic: AI regulation\nTotal Messages: 2")
    assert "ROUND 0" in text and "ROUND 1" in text
    assert "[AFFIRMATIVE - ARGUMENT]" in text
    assert "Words: 3 | Time: 14:30:00" in text
    assert text.endswith("END OF TRANSCRIPT - 2 total messages")
