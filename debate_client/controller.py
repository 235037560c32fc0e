"""Session controller: lifecycle calls, stream pumping, and round timing."""

import asyncio
import logging
from contextlib import aclosing

from config.settings import SessionConfig
from .api import CompletionResult, DebateApiClient, SessionInitRequest, SessionInitResponse
from .connection import StreamConnection
from .dispatcher import EventDispatcher
from .exceptions import DebateClientError, IllegalTransitionError, SessionControlError, StreamTransportError
from .handlers import DebateEventHandlers
from .listener import SessionListener
from .models import Message, Session, Topic
from .session import SessionContext
from .timer import RoundTimer
from .types import DebateStage, DebateVariant, MessageType, SessionStatus, Speaker

logger = logging.getLogger(__name__)


class DebateSessionController:
    """Drives one debate session against the server.

    Holds at most one open stream connection. Frames from it are dispatched
    by a pump task; closing the stream (pause, skip, reset, navigation away)
    stops frame delivery before the next frame is handled.
    """

    def __init__(
        self,
        api: DebateApiClient,
        config: SessionConfig | None = None,
        listener: SessionListener | None = None,
        timer: RoundTimer | None = None,
    ):
        self.api = api
        self.config = config or SessionConfig()
        self.listener = listener or SessionListener()
        self.variant = DebateVariant(self.config.variant)
        self.timer = timer or RoundTimer(self.config.round_seconds, on_tick=self.listener.on_timer_tick)
        self.context = SessionContext(
            session=self._new_session(),
            variant=self.variant,
            language=self.config.language,
        )
        self._dispatcher = EventDispatcher(DebateEventHandlers(self, self.listener).table())
        self._connection: StreamConnection | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._completion_pending = False

    @property
    def session(self) -> Session:
        return self.context.session

    @property
    def status(self) -> SessionStatus:
        return self.context.status

    @property
    def streaming(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def _new_session(self) -> Session:
        user_side = Speaker(self.config.user_side) if self.variant is DebateVariant.INTERACTIVE else None
        return Session(
            max_rounds=self.config.max_rounds,
            user_side=user_side,
            affirmative=self.config.affirmative,
            negative=self.config.negative,
        )

    def _require_id(self, action: str) -> str:
        if self.session.id is None:
            raise IllegalTransitionError(action, self.status)
        return self.session.id

    # ----- session control -----

    async def initialize(self, topic_id: int, title: str = "") -> SessionInitResponse:
        """Create the session on the server for the given topic."""
        self.context.machine.require("initialize", SessionStatus.NOT_STARTED)

        if self.variant is DebateVariant.INTERACTIVE:
            user_side = self.session.user_side or Speaker.AFFIRMATIVE
            ai_config = self.config.negative if user_side is Speaker.AFFIRMATIVE else self.config.affirmative
            request = SessionInitRequest(
                topic_id=topic_id,
                user_id=self.api.user_id,
                user_side=user_side.value,
                ai_config=ai_config,
            )
        else:
            request = SessionInitRequest(
                topic_id=topic_id,
                user_id=self.api.user_id,
                ai_configs={"affirmative": self.config.affirmative, "negative": self.config.negative},
                auto_play_speed=self.config.auto_play_speed,
            )

        response = await self.api.initialize_session(request)

        self._clear_session_state()
        self.session.id = response.session_id
        self.session.topic = Topic(id=topic_id, title=title)
        self._set_status(SessionStatus.INITIALIZED, "initialize")
        return response

    async def start(self) -> None:
        """Start the debate and, for the automated variant, open its stream."""
        self.context.machine.require("start", SessionStatus.INITIALIZED)
        session_id = self._require_id("start")
        await self.api.start_session(session_id)
        self._set_status(SessionStatus.IN_PROGRESS, "start")

        if self.variant is DebateVariant.AUTOMATED:
            self._open_stream(self.api.open_debate_stream(session_id, self.context.language))
        else:
            self._welcome()

    async def pause(self) -> None:
        """Pause the debate; transcript and scores are kept."""
        self.context.machine.require("pause", SessionStatus.IN_PROGRESS)
        if self.session.stage is DebateStage.JUDGING:
            raise IllegalTransitionError("pause during judging", self.status)
        session_id = self._require_id("pause")
        await self.api.pause_session(session_id)
        self._close_stream()
        # The stream may already have reported the pause (or the end) meanwhile
        if self.status is SessionStatus.IN_PROGRESS:
            self._set_status(SessionStatus.PAUSED, "pause")
        else:
            logger.info(f"Session {session_id} was already {self.status.value} when the pause was accepted")

    async def resume(self) -> None:
        """Resume a paused debate on a fresh stream."""
        self.context.machine.require("resume", SessionStatus.PAUSED)
        session_id = self._require_id("resume")
        await self.api.resume_session(session_id)
        self.session.paused_position = None
        self._set_status(SessionStatus.IN_PROGRESS, "resume")

        if self.variant is DebateVariant.AUTOMATED:
            self._open_stream(self.api.open_debate_stream(session_id, self.context.language))

    async def skip_to_end(self) -> None:
        """Jump straight to judging; optionally follow the judging stream."""
        self.context.machine.require("skip to end", SessionStatus.IN_PROGRESS, SessionStatus.PAUSED)
        session_id = self._require_id("skip to end")
        await self.api.skip_to_end(session_id)
        self._close_stream()
        if self.status is SessionStatus.COMPLETED:
            logger.info(f"Session {session_id} finished on its own before the skip was accepted")
            return
        self._set_status(SessionStatus.COMPLETED, "skip to end")

        if self.config.follow_judging_after_skip and self.variant is DebateVariant.AUTOMATED:
            logger.info(f"Session {session_id}: reconnecting for the judging sequence")
            self._open_stream(self.api.open_debate_stream(session_id, self.context.language))
        else:
            self.listener.on_completed(None)

    async def complete(self) -> CompletionResult:
        """Finish the session and fetch the winner, final scores and feedback."""
        self.context.machine.require(
            "complete", SessionStatus.IN_PROGRESS, SessionStatus.PAUSED, SessionStatus.COMPLETED
        )
        session_id = self._require_id("complete")
        result = await self.api.complete_session(session_id)

        self._close_stream()
        if self.status is not SessionStatus.COMPLETED:
            self._set_status(SessionStatus.COMPLETED, "complete")
        if result.winner:
            self.session.winner = result.winner
        self._apply_final_scores(result)

        logger.info(f"Session {session_id} completed, winner: {self.session.winner}")
        self.listener.on_completed(result)
        return result

    async def reset(self) -> None:
        """Return a completed session to NOT_STARTED, clearing its state."""
        self.context.machine.require("reset", SessionStatus.COMPLETED)
        self._close_stream()
        self._clear_session_state()
        self.session.id = None
        self.session.topic = None
        self._set_status(SessionStatus.NOT_STARTED, "reset")

    async def submit_argument(self, text: str) -> None:
        """Send the user's argument for the current round and stream the replies."""
        if self.variant is not DebateVariant.INTERACTIVE:
            raise ValueError("Arguments can only be submitted in an interactive debate")
        argument = text.strip()
        if not argument:
            raise ValueError("Argument cannot be empty")
        if len(argument) > self.config.max_argument_length:
            raise ValueError(
                f"Argument is {len(argument)} characters; the limit is {self.config.max_argument_length}"
            )
        self.context.machine.require("submit argument", SessionStatus.IN_PROGRESS)
        session_id = self._require_id("submit argument")
        if self.streaming:
            raise SessionControlError("submit argument", "the previous argument is still being answered")

        self._open_stream(
            self.api.open_argument_stream(
                session_id, argument, self.session.current_round, self.context.language
            )
        )

    def close(self) -> None:
        """Stop following the session (navigating away); status is left as is."""
        self._close_stream()
        self.timer.stop()

    async def wait_for_stream(self) -> None:
        """Wait until the current pump task (if any) has finished."""
        task = self._pump_task
        if task is not None:
            await asyncio.wait({task})

    # ----- stream lifecycle (called by the event handlers) -----

    def stream_completed(self, context: SessionContext) -> None:
        self._close_stream()

        if self.variant is DebateVariant.INTERACTIVE:
            if context.status is not SessionStatus.IN_PROGRESS:
                return
            if context.machine.next_round():
                logger.info(f"Session {context.session.id}: all {context.session.max_rounds} rounds argued")
                self._completion_pending = True
            else:
                self.listener.on_round_changed(context.session.current_round)
            return

        if context.machine.can_transition(SessionStatus.COMPLETED):
            self._set_status(SessionStatus.COMPLETED, "stream complete")
        else:
            logger.debug(f"Stream completed while session is {context.status.value}")
        self.listener.on_completed(None)

    def stream_paused(self, context: SessionContext, position: str | None) -> None:
        context.session.paused_position = position
        self._close_stream()
        if context.status is SessionStatus.IN_PROGRESS:
            self._set_status(SessionStatus.PAUSED, "server pause")
        else:
            logger.debug(f"Ignoring server pause while session is {context.status.value}")

    def stream_error(self, context: SessionContext, message: str) -> None:
        self.listener.on_error(message)
        self._close_stream()

    # ----- internals -----

    def _set_status(self, target: SessionStatus, action: str) -> None:
        self.context.machine.transition(target, action)
        if target is SessionStatus.IN_PROGRESS:
            self.timer.start()
        else:
            self.timer.stop()
        self.listener.on_status_changed(target)

    def _clear_session_state(self) -> None:
        self.context.transcript.clear()
        self.context.scores.reset()
        self.context.accumulator.reset()
        self.session.current_round = 1
        self.session.stage = DebateStage.OPENING
        self.session.paused_position = None
        self.session.winner = None
        self._completion_pending = False

    def _apply_final_scores(self, result: CompletionResult) -> None:
        if result.final_score_user is not None or result.final_score_ai is not None:
            board = self.context.scores.update_side_totals(
                self.session.user_side or Speaker.AFFIRMATIVE,
                result.final_score_user or 0.0,
                result.final_score_ai or 0.0,
            )
        elif result.affirmative_score is not None or result.negative_score is not None:
            board = self.context.scores.update_totals(
                result.affirmative_score or 0.0,
                result.negative_score or 0.0,
            )
        else:
            return
        self.listener.on_scores_changed(board)

    def _welcome(self) -> None:
        session = self.session
        title = session.topic.title if session.topic else ""
        side = (session.user_side or Speaker.AFFIRMATIVE).value.lower()
        message = Message(
            id=f"welcome-{session.id}",
            speaker=Speaker.MODERATOR,
            role=Speaker.MODERATOR.value,
            content=(
                f'Welcome to the debate on "{title}". You will argue the {side} side '
                f"over {session.max_rounds} rounds. Please present your opening argument."
            ),
            round=0,
            message_type=MessageType.ANNOUNCEMENT,
        )
        if self.context.transcript.append(message):
            self.listener.on_message(message)

    def _open_stream(self, connection: StreamConnection) -> None:
        self._close_stream()
        self._connection = connection
        self._pump_task = asyncio.create_task(self._pump(connection))

    def _close_stream(self) -> None:
        connection = self._connection
        self._connection = None
        if connection is not None:
            connection.close()
            self.context.accumulator.reset()
            self.listener.on_streaming(self.context.accumulator.buffer)

        task = self._pump_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            self._pump_task = None

    async def _pump(self, connection: StreamConnection) -> None:
        try:
            async with aclosing(connection.events()) as frames:
                async for frame in frames:
                    self._dispatcher.dispatch(self.context, frame)
        except StreamTransportError as e:
            if connection is self._connection:
                logger.error(f"Stream for session {self.session.id} failed: {e}")
                self.listener.on_error(str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure while handling the stream for session {self.session.id}")
            self.listener.on_error(f"Unexpected stream failure: {e}")
        finally:
            if connection is self._connection:
                self._close_stream()

        if self._completion_pending:
            self._completion_pending = False
            try:
                await self.complete()
            except DebateClientError as e:
                logger.error(f"Could not complete session {self.session.id}: {e}")
                self.listener.on_error(str(e))
