"""Hooks through which a display follows the debate."""

from typing import TYPE_CHECKING

from .models import Message, ScoreBoard, StreamingBuffer
from .types import SessionStatus

if TYPE_CHECKING:
    from .api import CompletionResult


class SessionListener:
    """Receives session updates. Every hook defaults to doing nothing."""

    def on_message(self, message: Message) -> None:
        pass

    def on_streaming(self, buffer: StreamingBuffer) -> None:
        """Partial content of the turn being streamed changed (or was cleared)."""
        pass

    def on_status_changed(self, status: SessionStatus) -> None:
        pass

    def on_round_changed(self, round_number: int) -> None:
        pass

    def on_scores_changed(self, board: ScoreBoard) -> None:
        pass

    def on_timer_tick(self, remaining: int) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass

    def on_completed(self, result: "CompletionResult | None") -> None:
        """The session finished; ``result`` is set when it came from a complete call."""
        pass
