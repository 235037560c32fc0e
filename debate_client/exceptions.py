"""Exceptions raised by the debate client."""

from .types import SessionStatus


class DebateClientError(Exception):
    """Base class for debate client errors."""


class StreamTransportError(DebateClientError):
    """The event stream could not be opened or dropped mid-way."""


class SessionControlError(DebateClientError):
    """A session-control call (init/start/pause/...) failed."""

    def __init__(self, action: str, detail: str, status_code: int | None = None):
        super().__init__(f"Session {action} failed: {detail}")
        self.action = action
        self.detail = detail
        self.status_code = status_code


class IllegalTransitionError(DebateClientError):
    """A session action was requested from a state that does not allow it."""

    def __init__(self, action: str, status: SessionStatus):
        super().__init__(f"Cannot {action} while session is {status.value}")
        self.action = action
        self.status = status


class SpeechSynthesisError(DebateClientError):
    """The speech synthesis service did not return audio."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"Speech synthesis failed: {detail}")
        self.status_code = status_code


class AudioPlaybackError(DebateClientError):
    """An audio output could not load or play a synthesized clip."""
