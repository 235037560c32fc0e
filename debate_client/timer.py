"""Display countdown for the current round."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RoundTimer:
    """One-second countdown restarted whenever a session enters IN_PROGRESS.

    Expiry only stops the countdown; it does not end the round.
    """

    def __init__(
        self,
        duration: int = 180,
        on_tick: Callable[[int], None] | None = None,
    ):
        self.duration = duration
        self.remaining = duration
        self._on_tick = on_tick
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """(Re)start the countdown from the full duration."""
        self.stop()
        self.remaining = self.duration
        self._notify()
        self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(1)
            self.remaining -= 1
            self._notify()
        logger.info("Round countdown expired")
        self._task = None

    def _notify(self) -> None:
        if self._on_tick is not None:
            self._on_tick(self.remaining)

    @staticmethod
    def format_remaining(seconds: int) -> str:
        minutes, secs = divmod(max(0, seconds), 60)
        return f"{minutes:02d}:{secs:02d}"
