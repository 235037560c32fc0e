"""Client for following and steering live debate event streams."""

from .api import CompletionResult, DebateApiClient, SessionInitRequest, SessionInitResponse
from .audio import AudioPlaybackController
from .controller import DebateSessionController
from .exceptions import (
    AudioPlaybackError,
    DebateClientError,
    IllegalTransitionError,
    SessionControlError,
    SpeechSynthesisError,
    StreamTransportError,
)
from .frames import Frame, FrameParser
from .listener import SessionListener
from .models import Message, ScoreBoard, Session
from .types import EventKind, MessageType, SessionStatus, Speaker

__all__ = [
    "AudioPlaybackController",
    "AudioPlaybackError",
    "CompletionResult",
    "DebateApiClient",
    "DebateClientError",
    "DebateSessionController",
    "EventKind",
    "Frame",
    "FrameParser",
    "IllegalTransitionError",
    "Message",
    "MessageType",
    "ScoreBoard",
    "Session",
    "SessionControlError",
    "SessionInitRequest",
    "SessionInitResponse",
    "SessionListener",
    "SessionStatus",
    "Speaker",
    "SpeechSynthesisError",
    "StreamTransportError",
]
