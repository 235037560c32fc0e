"""Reassembly of streamed fragments into finished turns."""

import logging

from .models import StreamingBuffer

logger = logging.getLogger(__name__)


class TurnAccumulator:
    """Owns the streaming buffer and coalesces fragments per speaker.

    Speaker keys are plain strings so judges can be told apart
    (``"JUDGE 1"``, ``"JUDGE 2"``) while still sharing one buffer.
    """

    def __init__(self) -> None:
        self.buffer = StreamingBuffer()

    def is_streaming(self, speaker_key: str) -> bool:
        """Whether the active buffer belongs to the given speaker."""
        return self.buffer.active and self.buffer.speaker == speaker_key

    def feed(self, speaker_key: str, fragment: str, complete: bool) -> str | None:
        """Apply one fragment event.

        Args:
            speaker_key: Speaker the event is attributed to
            fragment: Text carried by the event (may be empty)
            complete: Whether this event ends the turn

        Returns:
            The finished turn content, or None while the turn is still open
            or when the finished content is blank
        """
        if complete:
            return self._complete(speaker_key, fragment)

        if not self.is_streaming(speaker_key):
            if self.buffer.active:
                logger.debug(
                    f"Speaker switched from {self.buffer.speaker} to {speaker_key}; "
                    f"dropping {len(self.buffer.content)} buffered chars"
                )
            self.buffer.clear()
            self.buffer.active = True
            self.buffer.speaker = speaker_key

        self.buffer.content += fragment
        return None

    def reset(self) -> None:
        """Discard any partial turn."""
        self.buffer.clear()

    def _complete(self, speaker_key: str, fragment: str) -> str | None:
        if self.is_streaming(speaker_key):
            content = self.buffer.content
        else:
            content = fragment
        self.buffer.clear()

        if not content.strip():
            logger.debug(f"Suppressing empty turn from {speaker_key}")
            return None
        return content
