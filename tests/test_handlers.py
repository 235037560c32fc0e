"""Tests for event dispatch and per-event debate semantics."""

import logging

import pytest

from debate_client.dispatcher import EventDispatcher
from debate_client.frames import Frame
from debate_client.handlers import DebateEventHandlers
from debate_client.models import RoundScore
from debate_client.session import SessionContext
from debate_client.types import DebateStage, EventKind, MessageType, SessionStatus, Speaker


class FakeLifecycle:
    """Records the connection-level callbacks the handlers make."""

    def __init__(self) -> None:
        self.completed = 0
        self.paused: list[str | None] = []
        self.errors: list[str] = []

    def stream_completed(self, context: SessionContext) -> None:
        self.completed += 1

    def stream_paused(self, context: SessionContext, position: str | None) -> None:
        self.paused.append(position)

    def stream_error(self, context: SessionContext, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def lifecycle() -> FakeLifecycle:
    return FakeLifecycle()


@pytest.fixture
def dispatch(lifecycle, listener, context):
    dispatcher = EventDispatcher(DebateEventHandlers(lifecycle, listener).table())

    def send(event_type: str, **payload) -> EventKind | None:
        return dispatcher.dispatch(context, Frame(event_type, payload))

    return send


def test_dispatcher_rejects_incomplete_table(lifecycle) -> None:
    table = DebateEventHandlers(lifecycle).table()
    del table[EventKind.JUDGE_FEEDBACK]

    with pytest.raises(ValueError, match="judge_feedback"):
        EventDispatcher(table)


def test_streamed_ai_argument_becomes_one_message(dispatch, context, listener) -> None:
    context.session.user_side = Speaker.AFFIRMATIVE

    dispatch("ai_argument", chunk="Hel", complete=False, round=2)
    dispatch("ai_argument", chunk="lo world", complete=False, round=2)
    dispatch("ai_argument", chunk="", complete=True, round=2)

    [message] = context.transcript.messages
    assert message.speaker is Speaker.NEGATIVE
    assert message.round == 2
    assert message.content == "Hello world"
    assert message.message_type is MessageType.ARGUMENT
    assert listener.messages == [message]
    assert listener.streaming == ["Hel", "Hello world", ""]


def test_ai_argument_uses_declared_side(dispatch, context) -> None:
    dispatch("ai_argument", side="AFFIRMATIVE", chunk="Opening case", complete=True, argumentId=42)

    [message] = context.transcript.messages
    assert message.speaker is Speaker.AFFIRMATIVE
    assert message.id == "ai-42"
    assert message.round == context.session.current_round


def test_ai_argument_without_any_side_is_skipped(dispatch, context, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="debate_client.dispatcher"):
        kind = dispatch("ai_argument", chunk="orphan", complete=True)

    assert kind is EventKind.AI_ARGUMENT
    assert len(context.transcript) == 0
    assert "Skipping malformed ai_argument" in caplog.text


def test_round_scores_update_logs_round_and_announces(dispatch, context, listener) -> None:
    context.scores.update_totals(10.0, 12.0)

    dispatch("round_scores_update", round=3, affirmativeScore=7.5, negativeScore=8.0)

    [message] = context.transcript.messages
    assert message.content == "Round 3 Scores - Affirmative: 7.5, Negative: 8.0"
    assert message.speaker is Speaker.MODERATOR
    assert message.round == 3
    assert context.scores.round_scores == [RoundScore(3, 7.5, 8.0)]
    assert (context.scores.board.affirmative_total, context.scores.board.negative_total) == (10.0, 12.0)
    assert listener.scores == []


def test_cumulative_scores_overwrite_totals(dispatch, context, listener) -> None:
    dispatch("cumulative_scores_update", affirmativeTotal=15, negativeTotal=14.5)
    dispatch("cumulative_scores_update", affirmativeTotal=22, negativeTotal=None)

    assert listener.scores == [(15.0, 14.5), (22.0, 0.0)]


def test_scores_update_maps_user_and_ai_totals(dispatch, context) -> None:
    context.session.user_side = Speaker.NEGATIVE

    dispatch("scores_update", userTotal=30, aiTotal=25)

    assert context.scores.board.negative_total == 30.0
    assert context.scores.board.affirmative_total == 25.0


def test_final_scores_overwrite_totals(dispatch, context) -> None:
    dispatch("final_scores", affirmativeScore=41, negativeScore=39)

    assert (context.scores.board.affirmative_total, context.scores.board.negative_total) == (41.0, 39.0)


def test_round_start_advances_round(dispatch, context, listener) -> None:
    dispatch("round_start", round=2)

    assert context.session.current_round == 2
    assert context.session.stage is DebateStage.ROUNDS
    assert listener.rounds == [2]
    assert context.transcript.messages[0].content == "Round 2 begins!"


def test_opening_sequence(dispatch, context) -> None:
    dispatch("debate_start", topic="Should AI be regulated?")
    dispatch("organizer_rules", chunk="Rules: ", complete=False)
    dispatch("organizer_rules", chunk="be civil.", complete=False)
    dispatch("organizer_rules", complete=True)
    dispatch("moderator_introduction", chunk="Welcome!", complete=True)

    messages = context.transcript.messages
    assert messages[0].content == 'Debate on "Should AI be regulated?" has begun!'
    assert (messages[1].speaker, messages[1].content, messages[1].round) == (Speaker.ORGANIZER, "Rules: be civil.", 0)
    assert (messages[2].speaker, messages[2].content) == (Speaker.MODERATOR, "Welcome!")


def test_moderator_turn_types(dispatch, context) -> None:
    dispatch("moderator_summary", chunk="Summary", complete=True)
    dispatch("moderator_evaluation", chunk="Evaluation", complete=True)
    dispatch("moderator_announcement", chunk="Announcement", complete=True)

    assert [m.message_type for m in context.transcript] == [
        MessageType.SUMMARY,
        MessageType.EVALUATION,
        MessageType.ANNOUNCEMENT,
    ]


def test_user_argument_only_on_complete(dispatch, context) -> None:
    context.session.user_side = Speaker.AFFIRMATIVE

    dispatch("user_argument", content="My case", complete=False)
    dispatch("user_argument", content="My case", complete=True, argumentId=7)
    dispatch("user_argument", content="   ", complete=True)

    [message] = context.transcript.messages
    assert message.speaker is Speaker.AFFIRMATIVE
    assert message.content == "My case"
    assert message.id == "user-7"


def test_judges_are_kept_apart(dispatch, context) -> None:
    dispatch("judging_start")
    dispatch("judge_feedback", judgeNumber=1, chunk="Judge one ", complete=False)
    dispatch("judge_feedback", judgeNumber=2, chunk="Judge two says", complete=False)
    dispatch("judge_feedback", judgeNumber=2, complete=True)
    dispatch("judge_feedback", judgeNumber=3, chunk="Judge three verdict", complete=True)

    assert context.session.stage is DebateStage.JUDGING
    messages = context.transcript.messages
    assert messages[0].content == "The debate has concluded. Judges will now provide their feedback."
    judges = messages[1:]
    assert [(m.id, m.role, m.content) for m in judges] == [
        ("judge-feedback-2", "JUDGE", "Judge two says"),
        ("judge-feedback-3", "JUDGE", "Judge three verdict"),
    ]
    assert all(m.round == 6 for m in messages)


def test_winner_announcement_records_winner(dispatch, context) -> None:
    dispatch("winner_announcement", winner="NEGATIVE", chunk="Negative wins!", complete=True)

    assert context.session.winner == "NEGATIVE"
    assert context.transcript.messages[0].content == "Negative wins!"


def test_lifecycle_events_are_delegated(dispatch, lifecycle) -> None:
    dispatch("stream_complete")
    dispatch("debate_complete")
    dispatch("debate_paused", round=2, position="round_2_negative")
    dispatch("error", message="model unavailable")
    dispatch("error")

    assert lifecycle.completed == 2
    assert lifecycle.paused == ["round_2_negative"]
    assert lifecycle.errors == ["model unavailable", "An error occurred during streaming"]


def test_unknown_event_is_ignored(dispatch, context) -> None:
    assert dispatch("heartbeat", ts=1) is None
    assert len(context.transcript) == 0


def test_malformed_round_payload_is_skipped(dispatch, context) -> None:
    dispatch("round_start", round="two")
    dispatch("round_scores_update", round=1)

    assert context.session.current_round == 1
    assert context.scores.round_scores == []
    assert context.status is SessionStatus.IN_PROGRESS
