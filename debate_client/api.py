"""HTTP client for the debate server's session-control and voice endpoints."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config.settings import DebaterConfig, ServerConfig
from .connection import StreamConnection
from .exceptions import SessionControlError, SpeechSynthesisError

logger = logging.getLogger(__name__)


class SessionInitRequest(BaseModel):
    """Request body for creating a new debate session."""

    model_config = ConfigDict(populate_by_name=True)

    topic_id: int = Field(alias="topicId")
    user_id: int = Field(default=1, alias="userId")
    ai_configs: dict[str, DebaterConfig] | None = Field(default=None, alias="aiConfigs")
    user_side: str | None = Field(default=None, alias="userSide")
    ai_config: DebaterConfig | None = Field(default=None, alias="aiConfig")
    auto_play_speed: str | None = Field(default=None, alias="autoPlaySpeed")


class SessionInitResponse(BaseModel):
    """Response from session initialization."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    status: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SessionInitResponse":
        data = dict(payload)
        if data.get("sessionId") is not None:
            data["sessionId"] = str(data["sessionId"])
        return cls.model_validate(data)


class CompletionResult(BaseModel):
    """Outcome returned when a session is completed."""

    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    winner: str | None = None
    affirmative_score: float | None = Field(default=None, alias="affirmativeScore")
    negative_score: float | None = Field(default=None, alias="negativeScore")
    final_score_user: float | None = Field(default=None, alias="finalScoreUser")
    final_score_ai: float | None = Field(default=None, alias="finalScoreAI")
    final_scores: dict[str, Any] | None = Field(default=None, alias="finalScores")
    feedback: dict[str, Any] | None = None

    @property
    def overall_assessment(self) -> str | None:
        if not self.feedback:
            return None
        value = self.feedback.get("overall_assessment")
        return str(value) if value is not None else None


class DebateApiClient:
    """Thin async wrapper over the debate server's HTTP API."""

    def __init__(self, server: ServerConfig, client: httpx.AsyncClient | None = None):
        self._server = server
        self._base_url = server.resolved_base_url()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=server.request_timeout)

    @property
    def user_id(self) -> int:
        return self._server.user_id

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "DebateApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _post(self, action: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST a session-control call and return its JSON object."""
        try:
            response = await self._client.post(self._url(path), json=body)
            response.raise_for_status()
            payload = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(f"Session {action} rejected by server: {e}")
            raise SessionControlError(action, str(e), e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Session {action} request failed: {e}")
            raise SessionControlError(action, str(e)) from e

        if not isinstance(payload, dict):
            raise SessionControlError(action, f"unexpected response body: {payload!r}")
        if str(payload.get("status", "")).upper() == "ERROR" or payload.get("error"):
            detail = payload.get("message") or payload.get("error") or "server reported an error"
            raise SessionControlError(action, str(detail), response.status_code)
        return payload

    async def initialize_session(self, request: SessionInitRequest) -> SessionInitResponse:
        payload = await self._post(
            "initialize",
            "/api/debates/init",
            request.model_dump(by_alias=True, exclude_none=True),
        )
        try:
            result = SessionInitResponse.from_payload(payload)
        except ValidationError as e:
            raise SessionControlError("initialize", f"invalid response: {e}") from e
        logger.info(f"Initialized debate session {result.session_id}")
        return result

    async def start_session(self, session_id: str) -> dict[str, Any]:
        return await self._post("start", f"/api/debates/{session_id}/start")

    async def pause_session(self, session_id: str) -> dict[str, Any]:
        return await self._post("pause", f"/api/debates/{session_id}/pause")

    async def resume_session(self, session_id: str) -> dict[str, Any]:
        return await self._post("resume", f"/api/debates/{session_id}/resume")

    async def skip_to_end(self, session_id: str) -> dict[str, Any]:
        return await self._post("skip", f"/api/debates/{session_id}/skip-to-end")

    async def complete_session(self, session_id: str) -> CompletionResult:
        payload = await self._post("complete", f"/api/debates/{session_id}/complete")
        try:
            return CompletionResult.model_validate(payload)
        except ValidationError as e:
            raise SessionControlError("complete", f"invalid response: {e}") from e

    def open_debate_stream(self, session_id: str, language: str) -> StreamConnection:
        """Connection to the automated debate stream (not yet opened)."""
        return StreamConnection(
            self._client,
            "GET",
            self._url(f"/api/debates/{session_id}/stream-debate"),
            params={"language": language},
            timeout=self._server.stream_timeout,
        )

    def open_argument_stream(
        self, session_id: str, argument_text: str, round_number: int, language: str
    ) -> StreamConnection:
        """Connection streaming the responses to one user argument."""
        return StreamConnection(
            self._client,
            "POST",
            self._url(f"/api/debates/{session_id}/submit-argument-stream"),
            json={
                "argumentText": argument_text,
                "roundNumber": round_number,
                "language": language,
            },
            timeout=self._server.stream_timeout,
        )

    async def synthesize_speech(self, text: str, role: str, language: str) -> bytes:
        """Return synthesized audio for ``text`` spoken as ``role``."""
        try:
            response = await self._client.post(
                self._url("/api/voice/generate-speech"),
                json={"text": text, "role": role, "language": language},
            )
        except httpx.HTTPError as e:
            raise SpeechSynthesisError(str(e)) from e

        if not response.is_success:
            raise SpeechSynthesisError(f"status {response.status_code}", response.status_code)
        if not response.content:
            raise SpeechSynthesisError("empty audio response", response.status_code)

        logger.debug(f"Synthesized {len(response.content)} bytes of audio for {role}")
        return response.content
