"""Routing of stream frames to their event handlers."""

import logging
from collections.abc import Callable, Mapping
from typing import TypeAlias

from .frames import Frame
from .session import SessionContext
from .types import EventKind, EventPayload

logger = logging.getLogger(__name__)

EventHandler: TypeAlias = Callable[[SessionContext, EventPayload], None]


class EventDispatcher:
    """Table-driven dispatch from ``EventKind`` to exactly one handler."""

    def __init__(self, handlers: Mapping[EventKind, EventHandler]):
        missing = [kind.value for kind in EventKind if kind not in handlers]
        if missing:
            raise ValueError(f"No handler registered for event kinds: {missing}")
        self._handlers: dict[EventKind, EventHandler] = dict(handlers)

    @staticmethod
    def resolve(event_type: str) -> EventKind | None:
        """Map an event type string to its kind, or None if unknown."""
        try:
            return EventKind(event_type)
        except ValueError:
            return None

    def dispatch(self, context: SessionContext, frame: Frame) -> EventKind | None:
        """Run the handler for one frame.

        Unknown event types are ignored. A handler that cannot make sense of
        its payload skips that single frame; the stream carries on.
        """
        kind = self.resolve(frame.event_type)
        if kind is None:
            logger.debug(f"Ignoring unknown event type '{frame.event_type}'")
            return None

        logger.debug(f"Dispatching {kind.value}: {frame.data}")
        try:
            self._handlers[kind](context, frame.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed {kind.value} payload ({type(e).__name__}: {e}): {frame.data}")
        return kind
