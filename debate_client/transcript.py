"""In-memory transcript of finished debate turns."""

import logging
from collections.abc import Iterator

from .models import Message
from .types import MessageType, Speaker

logger = logging.getLogger(__name__)


class TranscriptStore:
    """Append-only list of finished messages, consumed by the display."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._ids: set[str] = set()

    def append(self, message: Message) -> bool:
        """Append a message unless one with the same id is already stored."""
        if message.id in self._ids:
            logger.warning(f"Ignoring duplicate transcript message {message.id}")
            return False
        self._messages.append(message)
        self._ids.add(message.id)
        logger.debug(
            f"Transcript +{message.speaker.value} ({message.message_type.value}, round {message.round}): "
            f"{len(message.content)} chars"
        )
        return True

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def clear(self) -> None:
        self._messages.clear()
        self._ids.clear()

    def by_speaker(self, speaker: Speaker) -> list[Message]:
        return [m for m in self._messages if m.speaker is speaker]

    def arguments(self) -> list[Message]:
        return [m for m in self._messages if m.message_type is MessageType.ARGUMENT]

    def format_transcript(self, title: str = "") -> str:
        """Format the transcript as plain text."""
        lines = ["DEBATE TRANSCRIPT"]
        if title:
            lines.append(f"Topic: {title}")
        lines.extend([f"Total Messages: {len(self._messages)}", "", "=" * 80, ""])

        current_round: int | None = None
        for msg in self._messages:
            if msg.round != current_round:
                if current_round is not None:
                    lines.append("")
                lines.append(f"ROUND {msg.round}")
                lines.append("-" * 40)
                current_round = msg.round

            lines.extend(
                [
                    f"[{msg.speaker.value} - {msg.message_type.value}]",
                    msg.content.strip(),
                    f"    Words: {len(msg.content.split())} | Time: {msg.timestamp.strftime('%H:%M:%S')}",
                    "",
                ]
            )

        lines.extend(["=" * 80, f"END OF TRANSCRIPT - {len(self._messages)} total messages"])
        return "\n".join(lines)
