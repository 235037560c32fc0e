"""Debate-phase semantics for each stream event kind."""

import logging
import uuid
from datetime import datetime
from functools import partial
from typing import Any, Protocol

from .dispatcher import EventHandler
from .listener import SessionListener
from .models import Message
from .scoring import read_score
from .session import SessionContext
from .types import DebateStage, EventKind, EventPayload, MessageType, Speaker

logger = logging.getLogger(__name__)


class StreamLifecycle(Protocol):
    """Connection-level reactions the handlers delegate to the controller."""

    def stream_completed(self, context: SessionContext) -> None: ...

    def stream_paused(self, context: SessionContext, position: str | None) -> None: ...

    def stream_error(self, context: SessionContext, message: str) -> None: ...


def _fragment(payload: EventPayload) -> str:
    value = payload.get("chunk")
    return "" if value is None else str(value)


def _timestamp(payload: EventPayload) -> datetime:
    value = payload.get("timestamp")
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.debug(f"Unparseable timestamp {value!r}, using local time")
    return datetime.now()


def _message_id(prefix: str, ref: Any = None) -> str:
    if ref is None:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"
    return f"{prefix}-{ref}"


class DebateEventHandlers:
    """Handlers for every ``EventKind``, sharing one listener and lifecycle."""

    def __init__(self, lifecycle: StreamLifecycle, listener: SessionListener | None = None):
        self._lifecycle = lifecycle
        self._listener = listener or SessionListener()

    def table(self) -> dict[EventKind, EventHandler]:
        """Handler table for ``EventDispatcher``."""
        return {
            EventKind.DEBATE_START: self.on_debate_start,
            EventKind.ORGANIZER_RULES: self.on_organizer_rules,
            EventKind.MODERATOR_INTRODUCTION: self.on_moderator_introduction,
            EventKind.ROUND_START: self.on_round_start,
            EventKind.USER_ARGUMENT: self.on_user_argument,
            EventKind.MODERATOR_SUMMARY: partial(self.on_moderator_turn, message_type=MessageType.SUMMARY),
            EventKind.MODERATOR_EVALUATION: partial(self.on_moderator_turn, message_type=MessageType.EVALUATION),
            EventKind.MODERATOR_ANNOUNCEMENT: partial(self.on_moderator_turn, message_type=MessageType.ANNOUNCEMENT),
            EventKind.AI_ARGUMENT: self.on_ai_argument,
            EventKind.ROUND_SCORES_UPDATE: self.on_round_scores_update,
            EventKind.CUMULATIVE_SCORES_UPDATE: self.on_cumulative_scores_update,
            EventKind.SCORES_UPDATE: self.on_scores_update,
            EventKind.FINAL_SCORES: self.on_final_scores,
            EventKind.JUDGING_START: self.on_judging_start,
            EventKind.JUDGE_FEEDBACK: self.on_judge_feedback,
            EventKind.WINNER_ANNOUNCEMENT: self.on_winner_announcement,
            EventKind.ROUND_COMPLETE: self.on_round_complete,
            EventKind.STREAM_COMPLETE: self.on_stream_complete,
            EventKind.DEBATE_COMPLETE: self.on_stream_complete,
            EventKind.DEBATE_PAUSED: self.on_debate_paused,
            EventKind.ERROR: self.on_error,
        }

    # ----- opening -----

    def on_debate_start(self, context: SessionContext, payload: EventPayload) -> None:
        session = context.session
        topic = payload.get("topic") or (session.topic.title if session.topic else "")
        if session.topic is not None and not session.topic.title and topic:
            session.topic.title = str(topic)
        session.stage = DebateStage.OPENING
        self._announce(context, payload, f'Debate on "{topic}" has begun!', 0, "debate-start")

    def on_organizer_rules(self, context: SessionContext, payload: EventPayload) -> None:
        self._stream_turn(
            context,
            payload,
            speaker_key=Speaker.ORGANIZER.value,
            speaker=Speaker.ORGANIZER,
            message_type=MessageType.ANNOUNCEMENT,
            round_number=0,
            id_prefix="organizer-rules",
        )

    def on_moderator_introduction(self, context: SessionContext, payload: EventPayload) -> None:
        self._stream_turn(
            context,
            payload,
            speaker_key=Speaker.MODERATOR.value,
            speaker=Speaker.MODERATOR,
            message_type=MessageType.ANNOUNCEMENT,
            round_number=0,
            id_prefix="moderator-intro",
        )

    # ----- rounds -----

    def on_round_start(self, context: SessionContext, payload: EventPayload) -> None:
        round_number = int(payload["round"])
        context.machine.advance_to_round(round_number)
        self._listener.on_round_changed(round_number)
        self._announce(context, payload, f"Round {round_number} begins!", round_number, "round-start")

    def on_user_argument(self, context: SessionContext, payload: EventPayload) -> None:
        if not payload.get("complete"):
            return

        side = context.session.user_side
        if side is None and payload.get("side"):
            side = Speaker(str(payload["side"]))
        if side is None:
            logger.warning("Received user_argument without a user side; skipping")
            return

        content = str(payload.get("content") or "")
        if not content.strip():
            return

        self._append(
            context,
            Message(
                id=_message_id("user", payload.get("argumentId")),
                speaker=side,
                role=str(payload.get("role") or side.value),
                content=content,
                round=int(payload.get("round") or context.session.current_round),
                message_type=MessageType.ARGUMENT,
                timestamp=_timestamp(payload),
            ),
        )

    def on_moderator_turn(
        self, context: SessionContext, payload: EventPayload, *, message_type: MessageType
    ) -> None:
        self._stream_turn(
            context,
            payload,
            speaker_key=Speaker.MODERATOR.value,
            speaker=Speaker.MODERATOR,
            message_type=message_type,
            round_number=context.session.current_round,
            id_prefix="moderator",
        )

    def on_ai_argument(self, context: SessionContext, payload: EventPayload) -> None:
        if payload.get("side"):
            side = Speaker(str(payload["side"]))
        elif context.session.user_side is not None:
            side = context.session.user_side.opponent
        else:
            raise ValueError("ai_argument carries no side and no user side is set")

        self._stream_turn(
            context,
            payload,
            speaker_key=side.value,
            speaker=side,
            message_type=MessageType.ARGUMENT,
            round_number=int(payload.get("round") or context.session.current_round),
            id_prefix="ai",
            role=payload.get("role"),
            ref=payload.get("argumentId"),
        )

    def on_round_complete(self, context: SessionContext, payload: EventPayload) -> None:
        logger.info(f"Session {context.session.id}: round {payload.get('round')} complete")

    # ----- scoring -----

    def on_round_scores_update(self, context: SessionContext, payload: EventPayload) -> None:
        round_number = int(payload["round"])
        affirmative = float(payload["affirmativeScore"])
        negative = float(payload["negativeScore"])

        self._announce(
            context,
            payload,
            f"Round {round_number} Scores - Affirmative: {affirmative:.1f}, Negative: {negative:.1f}",
            round_number,
            f"round-score-{round_number}",
        )
        context.scores.record_round(round_number, affirmative, negative)

    def on_cumulative_scores_update(self, context: SessionContext, payload: EventPayload) -> None:
        board = context.scores.update_totals(
            read_score(payload, "affirmativeTotal"),
            read_score(payload, "negativeTotal"),
        )
        self._listener.on_scores_changed(board)

    def on_scores_update(self, context: SessionContext, payload: EventPayload) -> None:
        if "userTotal" in payload or "aiTotal" in payload:
            board = context.scores.update_side_totals(
                context.session.user_side or Speaker.AFFIRMATIVE,
                read_score(payload, "userTotal"),
                read_score(payload, "aiTotal"),
            )
        else:
            board = context.scores.update_totals(
                read_score(payload, "affirmativeScore", "affirmativeTotal"),
                read_score(payload, "negativeScore", "negativeTotal"),
            )
        self._listener.on_scores_changed(board)

    def on_final_scores(self, context: SessionContext, payload: EventPayload) -> None:
        board = context.scores.update_totals(
            read_score(payload, "affirmativeScore", "affirmativeTotal"),
            read_score(payload, "negativeScore", "negativeTotal"),
        )
        self._listener.on_scores_changed(board)

    # ----- judging -----

    def on_judging_start(self, context: SessionContext, payload: EventPayload) -> None:
        context.machine.enter_judging()
        self._announce(
            context,
            payload,
            "The debate has concluded. Judges will now provide their feedback.",
            context.session.judging_round,
            "judging-start",
        )

    def on_judge_feedback(self, context: SessionContext, payload: EventPayload) -> None:
        judge_number = payload.get("judgeNumber")
        speaker_key = f"JUDGE {judge_number}" if judge_number is not None else Speaker.JUDGE.value
        self._stream_turn(
            context,
            payload,
            speaker_key=speaker_key,
            speaker=Speaker.JUDGE,
            message_type=MessageType.EVALUATION,
            round_number=context.session.judging_round,
            id_prefix="judge-feedback",
            ref=judge_number,
        )

    def on_winner_announcement(self, context: SessionContext, payload: EventPayload) -> None:
        if payload.get("winner"):
            context.session.winner = str(payload["winner"])
        self._stream_turn(
            context,
            payload,
            speaker_key=Speaker.MODERATOR.value,
            speaker=Speaker.MODERATOR,
            message_type=MessageType.ANNOUNCEMENT,
            round_number=context.session.judging_round,
            id_prefix="winner",
        )

    # ----- connection lifecycle -----

    def on_stream_complete(self, context: SessionContext, payload: EventPayload) -> None:
        self._lifecycle.stream_completed(context)

    def on_debate_paused(self, context: SessionContext, payload: EventPayload) -> None:
        position = payload.get("position")
        logger.info(f"Server paused session {context.session.id} at round {payload.get('round')} ({position})")
        self._lifecycle.stream_paused(context, str(position) if position is not None else None)

    def on_error(self, context: SessionContext, payload: EventPayload) -> None:
        message = payload.get("error") or payload.get("message") or "An error occurred during streaming"
        logger.error(f"Stream error for session {context.session.id}: {message}")
        self._lifecycle.stream_error(context, str(message))

    # ----- helpers -----

    def _stream_turn(
        self,
        context: SessionContext,
        payload: EventPayload,
        *,
        speaker_key: str,
        speaker: Speaker,
        message_type: MessageType,
        round_number: int,
        id_prefix: str,
        role: str | None = None,
        ref: Any = None,
    ) -> Message | None:
        """Feed one fragment event and append the turn once it completes."""
        content = context.accumulator.feed(speaker_key, _fragment(payload), bool(payload.get("complete")))
        self._listener.on_streaming(context.accumulator.buffer)
        if content is None:
            return None

        message = Message(
            id=_message_id(id_prefix, ref),
            speaker=speaker,
            role=str(role or speaker.value),
            content=content,
            round=round_number,
            message_type=message_type,
            timestamp=_timestamp(payload),
        )
        self._append(context, message)
        return message

    def _announce(
        self, context: SessionContext, payload: EventPayload, content: str, round_number: int, id_prefix: str
    ) -> None:
        self._append(
            context,
            Message(
                id=_message_id(id_prefix),
                speaker=Speaker.MODERATOR,
                role=Speaker.MODERATOR.value,
                content=content,
                round=round_number,
                message_type=MessageType.ANNOUNCEMENT,
                timestamp=_timestamp(payload),
            ),
        )

    def _append(self, context: SessionContext, message: Message) -> None:
        if context.transcript.append(message):
            self._listener.on_message(message)
