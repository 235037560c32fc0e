"""Line-oriented parser for the debate event stream.

The server writes ``event:`` / ``data:`` line pairs, one JSON object per data
line. The current event type is sticky: it is set by the most recent
``event:`` line and applies to every following ``data:`` line until another
``event:`` line arrives. No blank-line frame terminator is required, and the
two lines of a pair may arrive in different reads.
"""

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

from .types import EventPayload

logger = logging.getLogger(__name__)

EVENT_PREFIX = "event:"
DATA_PREFIX = "data:"


@dataclass(frozen=True)
class Frame:
    """One decoded event from the stream."""

    event_type: str
    data: EventPayload


class FrameParser:
    """Incremental parser turning stream reads into frames.

    One parser instance belongs to exactly one connection; a reconnection
    must use a fresh parser so no state leaks between connections.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._event_type = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._closed = False

    @property
    def current_event_type(self) -> str:
        return self._event_type

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, chunk: str | bytes) -> list[Frame]:
        """Consume one read and return the frames completed by it.

        Args:
            chunk: Newly received text, or raw UTF-8 bytes

        Returns:
            Frames in arrival order; the trailing incomplete line stays buffered
        """
        if self._closed:
            return []

        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)

        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()

        frames: list[Frame] = []
        for line in lines:
            frame = self._parse_line(line.rstrip("\r"))
            if frame is not None:
                frames.append(frame)
        return frames

    def close(self) -> None:
        """End the stream. An incomplete trailing line is discarded."""
        if self._closed:
            return
        self._closed = True
        tail = self._buffer + self._decoder.decode(b"", final=True)
        if tail.strip():
            logger.debug(f"Discarding incomplete stream line: {tail[:100]!r}")
        self._buffer = ""

    def _parse_line(self, line: str) -> Frame | None:
        if line.startswith(EVENT_PREFIX):
            self._event_type = line[len(EVENT_PREFIX):].strip()
            return None

        if not line.startswith(DATA_PREFIX):
            # Blank separators, ":" comments and unknown fields carry nothing
            return None

        data = line[len(DATA_PREFIX):].strip()
        if not data:
            return None

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Dropping malformed '{self._event_type}' payload ({e}): {data[:100]}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Dropping non-object '{self._event_type}' payload: {data[:100]}")
            return None

        return Frame(event_type=self._event_type, data=payload)


async def iter_frames(chunks: AsyncIterable[str | bytes]) -> AsyncIterator[Frame]:
    """Parse an async sequence of reads into frames with a fresh parser."""
    parser = FrameParser()
    try:
        async for chunk in chunks:
            for frame in parser.feed(chunk):
                yield frame
    finally:
        parser.close()
