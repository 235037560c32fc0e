"""Session lifecycle state machine and per-session context."""

import logging
from dataclasses import dataclass, field

from .accumulator import TurnAccumulator
from .exceptions import IllegalTransitionError
from .models import Session
from .scoring import ScoreAggregator
from .transcript import TranscriptStore
from .types import DebateStage, DebateVariant, SessionStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.NOT_STARTED: frozenset({SessionStatus.INITIALIZED}),
    SessionStatus.INITIALIZED: frozenset({SessionStatus.IN_PROGRESS}),
    SessionStatus.IN_PROGRESS: frozenset({SessionStatus.PAUSED, SessionStatus.COMPLETED}),
    SessionStatus.PAUSED: frozenset({SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset({SessionStatus.NOT_STARTED}),
}


class SessionStateMachine:
    """Owns the status and round counter of a session.

    Every status change goes through ``transition`` so only the edges listed
    in ``ALLOWED_TRANSITIONS`` can ever be taken.
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    def can_transition(self, target: SessionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.session.status]

    def require(self, action: str, *allowed: SessionStatus) -> None:
        """Raise unless the session is in one of ``allowed``."""
        if self.session.status not in allowed:
            raise IllegalTransitionError(action, self.session.status)

    def transition(self, target: SessionStatus, action: str | None = None) -> None:
        if not self.can_transition(target):
            raise IllegalTransitionError(action or target.value.lower(), self.session.status)
        previous = self.session.status
        self.session.status = target
        logger.info(f"Session {self.session.id}: {previous.value} -> {target.value}")

    def advance_to_round(self, round_number: int) -> None:
        """Follow a round announced by the server."""
        self.session.current_round = round_number
        self.session.stage = DebateStage.ROUNDS

    def next_round(self) -> bool:
        """Move to the next round; True once all rounds are exhausted."""
        self.session.current_round += 1
        return self.session.current_round > self.session.max_rounds

    def enter_judging(self) -> None:
        self.session.stage = DebateStage.JUDGING


@dataclass
class SessionContext:
    """Everything one session's event handlers read and mutate."""

    session: Session
    variant: DebateVariant = DebateVariant.AUTOMATED
    language: str = "en"
    accumulator: TurnAccumulator = field(default_factory=TurnAccumulator)
    scores: ScoreAggregator = field(default_factory=ScoreAggregator)
    transcript: TranscriptStore = field(default_factory=TranscriptStore)
    machine: SessionStateMachine = field(init=False)

    def __post_init__(self) -> None:
        self.machine = SessionStateMachine(self.session)

    @property
    def status(self) -> SessionStatus:
        return self.session.status
