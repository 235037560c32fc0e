"""Data models for the debate client."""

from dataclasses import dataclass, field
from datetime import datetime

from config.settings import DebaterConfig
from .types import DebateStage, MessageType, SessionStatus, Speaker


@dataclass(frozen=True)
class Message:
    """A finished turn in the debate transcript."""

    id: str
    speaker: Speaker
    role: str
    content: str
    round: int
    message_type: MessageType
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StreamingBuffer:
    """Partial content of the turn currently being streamed."""

    active: bool = False
    speaker: str | None = None
    content: str = ""

    def clear(self) -> None:
        self.active = False
        self.speaker = None
        self.content = ""


@dataclass
class Topic:
    """Debate topic selected for a session."""

    id: int
    title: str = ""


@dataclass
class Session:
    """State of one debate session, from initialization to reset."""

    id: str | None = None
    status: SessionStatus = SessionStatus.NOT_STARTED
    current_round: int = 1
    max_rounds: int = 5
    stage: DebateStage = DebateStage.OPENING
    topic: Topic | None = None
    user_side: Speaker | None = None
    affirmative: DebaterConfig = field(default_factory=DebaterConfig)
    negative: DebaterConfig = field(default_factory=DebaterConfig)
    paused_position: str | None = None
    winner: str | None = None

    @property
    def judging_round(self) -> int:
        """Round number used for messages of the judging stage."""
        return self.max_rounds + 1


@dataclass
class ScoreBoard:
    """Running totals for the two debate sides."""

    affirmative_total: float = 0.0
    negative_total: float = 0.0

    def total_for(self, side: Speaker) -> float:
        if side is Speaker.AFFIRMATIVE:
            return self.affirmative_total
        if side is Speaker.NEGATIVE:
            return self.negative_total
        raise ValueError(f"{side.value} does not keep a score")


@dataclass(frozen=True)
class RoundScore:
    """Per-side score reported for a single round."""

    round: int
    affirmative: float
    negative: float


@dataclass
class AudioPlaybackState:
    """The single active audio playback."""

    current_message_id: str | None = None
    is_playing: bool = False
    position: float = 0.0

    def clear(self) -> None:
        self.current_message_id = None
        self.is_playing = False
        self.position = 0.0
