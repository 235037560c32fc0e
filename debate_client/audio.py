"""Read-aloud playback of transcript messages.

Only one message may play at a time. Starting another message first stops
the active one, releasing its audio resource and returning its display state
to idle.
"""

import logging
from collections.abc import Callable
from functools import partial
from typing import Protocol

from .exceptions import AudioPlaybackError, SpeechSynthesisError
from .models import AudioPlaybackState, Message
from .types import PlaybackState, PlaybackStateCallback

logger = logging.getLogger(__name__)


class SpeechSynthesizer(Protocol):
    """Turns message text into audio bytes (``DebateApiClient`` implements this)."""

    async def synthesize_speech(self, text: str, role: str, language: str) -> bytes: ...


class AudioResource(Protocol):
    """A loaded audio clip owned by the playback controller."""

    @property
    def position(self) -> float: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def release(self) -> None: ...


class AudioOutput(Protocol):
    """Audio device that can load synthesized clips.

    ``on_finished`` must be called when a clip plays to its end and
    ``on_error`` when playback fails; ``load`` raises ``AudioPlaybackError``
    if the clip cannot be loaded at all.
    """

    def load(
        self,
        audio: bytes,
        on_finished: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> AudioResource: ...


class AudioPlaybackController:
    """Per-message playback state machine with a single active playback."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        output: AudioOutput,
        language: str = "en",
        on_state_change: PlaybackStateCallback | None = None,
    ):
        self.state = AudioPlaybackState()
        self.language = language
        self._synthesizer = synthesizer
        self._output = output
        self._on_state_change = on_state_change
        self._states: dict[str, PlaybackState] = {}
        self._resource: AudioResource | None = None
        self._loading_id: str | None = None
        self._request_serial = 0

    def state_of(self, message_id: str) -> PlaybackState:
        return self._states.get(message_id, PlaybackState.IDLE)

    async def toggle(self, message: Message) -> None:
        """Pause, resume, or start playback of ``message``."""
        if self._resource is not None and self.state.current_message_id == message.id:
            if self.state.is_playing:
                self.pause()
            else:
                self.resume()
            return

        if self._loading_id == message.id:
            logger.debug(f"Audio for {message.id} is already loading")
            return

        await self.play(message)

    async def play(self, message: Message) -> None:
        """Stop whatever is active, then synthesize and play ``message``."""
        self.stop()

        self._request_serial += 1
        serial = self._request_serial
        self._loading_id = message.id
        self._set_state(message.id, PlaybackState.LOADING)

        try:
            audio = await self._synthesizer.synthesize_speech(
                message.content, message.speaker.value, self.language
            )
        except SpeechSynthesisError as e:
            if serial == self._request_serial:
                self._loading_id = None
                self._set_state(message.id, PlaybackState.ERROR)
            logger.error(f"Audio synthesis failed for message {message.id}: {e}")
            return

        if serial != self._request_serial:
            logger.debug(f"Discarding superseded audio for message {message.id}")
            return
        self._loading_id = None

        try:
            resource = self._output.load(
                audio,
                on_finished=partial(self._handle_finished, message.id),
                on_error=partial(self._handle_error, message.id),
            )
        except AudioPlaybackError as e:
            logger.error(f"Audio output could not load message {message.id}: {e}")
            self._set_state(message.id, PlaybackState.ERROR)
            return

        self._resource = resource
        self.state.current_message_id = message.id
        self.state.position = 0.0
        try:
            resource.play()
        except AudioPlaybackError as e:
            self._handle_error(message.id, e)
            return
        self.state.is_playing = True
        self._set_state(message.id, PlaybackState.PLAYING)

    def pause(self) -> None:
        if self._resource is None or not self.state.is_playing:
            return
        self._resource.pause()
        self.state.is_playing = False
        self.state.position = self._resource.position
        if self.state.current_message_id is not None:
            self._set_state(self.state.current_message_id, PlaybackState.PAUSED)

    def resume(self) -> None:
        if self._resource is None or self.state.is_playing:
            return
        self._resource.play()
        self.state.is_playing = True
        if self.state.current_message_id is not None:
            self._set_state(self.state.current_message_id, PlaybackState.PLAYING)

    def stop(self) -> None:
        """Stop the active (or loading) playback and return it to idle."""
        if self._loading_id is not None:
            loading_id = self._loading_id
            self._loading_id = None
            self._request_serial += 1
            self._set_state(loading_id, PlaybackState.IDLE)

        if self._resource is None:
            return
        message_id = self.state.current_message_id
        self._resource.pause()
        self._release()
        if message_id is not None:
            self._set_state(message_id, PlaybackState.IDLE)

    def _handle_finished(self, message_id: str) -> None:
        if message_id != self.state.current_message_id:
            return
        self._release()
        self._set_state(message_id, PlaybackState.IDLE)

    def _handle_error(self, message_id: str, error: Exception) -> None:
        if message_id != self.state.current_message_id:
            return
        logger.error(f"Audio playback failed for message {message_id}: {error}")
        self._release()
        self._set_state(message_id, PlaybackState.ERROR)

    def _release(self) -> None:
        resource = self._resource
        self._resource = None
        self.state.clear()
        if resource is not None:
            resource.release()

    def _set_state(self, message_id: str, state: PlaybackState) -> None:
        self._states[message_id] = state
        if self._on_state_change is not None:
            self._on_state_change(message_id, state)
