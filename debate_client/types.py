"""Shared types and enums for the debate client."""

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeAlias

EventPayload: TypeAlias = dict[str, Any]


class Speaker(Enum):
    """Roles that can author a transcript message."""

    MODERATOR = "MODERATOR"
    ORGANIZER = "ORGANIZER"
    AFFIRMATIVE = "AFFIRMATIVE"
    NEGATIVE = "NEGATIVE"
    JUDGE = "JUDGE"

    @property
    def opponent(self) -> "Speaker":
        """The opposing debate side (only defined for the two sides)."""
        if self is Speaker.AFFIRMATIVE:
            return Speaker.NEGATIVE
        if self is Speaker.NEGATIVE:
            return Speaker.AFFIRMATIVE
        raise ValueError(f"{self.value} has no opposing side")


class MessageType(Enum):
    """Kinds of transcript message."""

    ANNOUNCEMENT = "ANNOUNCEMENT"
    ARGUMENT = "ARGUMENT"
    SUMMARY = "SUMMARY"
    EVALUATION = "EVALUATION"


class SessionStatus(Enum):
    """Lifecycle states of a debate session."""

    NOT_STARTED = "NOT_STARTED"
    INITIALIZED = "INITIALIZED"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class DebateStage(Enum):
    """Which part of the debate the stream is currently delivering."""

    OPENING = "opening"
    ROUNDS = "rounds"
    JUDGING = "judging"


class DebateVariant(Enum):
    """Automated AI vs AI debate or interactive user vs AI debate."""

    AUTOMATED = "automated"
    INTERACTIVE = "interactive"


class EventKind(Enum):
    """Event types carried on the debate stream."""

    DEBATE_START = "debate_start"
    ORGANIZER_RULES = "organizer_rules"
    MODERATOR_INTRODUCTION = "moderator_introduction"
    ROUND_START = "round_start"
    USER_ARGUMENT = "user_argument"
    MODERATOR_SUMMARY = "moderator_summary"
    MODERATOR_EVALUATION = "moderator_evaluation"
    MODERATOR_ANNOUNCEMENT = "moderator_announcement"
    AI_ARGUMENT = "ai_argument"
    ROUND_SCORES_UPDATE = "round_scores_update"
    CUMULATIVE_SCORES_UPDATE = "cumulative_scores_update"
    SCORES_UPDATE = "scores_update"
    FINAL_SCORES = "final_scores"
    JUDGING_START = "judging_start"
    JUDGE_FEEDBACK = "judge_feedback"
    WINNER_ANNOUNCEMENT = "winner_announcement"
    ROUND_COMPLETE = "round_complete"
    STREAM_COMPLETE = "stream_complete"
    DEBATE_COMPLETE = "debate_complete"
    DEBATE_PAUSED = "debate_paused"
    ERROR = "error"


class PlaybackState(Enum):
    """Display state of one message's audio playback."""

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


PlaybackStateCallback: TypeAlias = Callable[[str, PlaybackState], None]
