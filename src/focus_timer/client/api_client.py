"""HTTP client for the timer API."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx

from focus_timer.api.schemas import CompletedSessionResponse, SessionResponse
from focus_timer.domain.errors import (
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from focus_timer.domain.sessions import CompletionResult, SessionType, TimerSession

_ERRORS_BY_STATUS = {
    404: NotFoundError,
    409: StateConflictError,
    422: ValidationError,
}


class TimerApiClient(Protocol):
    """Interface for the timer API as seen by a client."""

    async def get_active(self) -> TimerSession | None:
        """Fetch the active session snapshot, if any."""

    async def start(  # noqa: PLR0913
        self,
        session_type: SessionType,
        duration_minutes: int,
        task_id: UUID | None = None,
        project: str | None = None,
        notes: str | None = None,
    ) -> TimerSession:
        """Start a new session."""

    async def pause(self) -> TimerSession:
        """Pause the running session."""

    async def resume(self) -> TimerSession:
        """Resume the paused session."""

    async def complete(self, session_id: UUID) -> CompletionResult:
        """Complete a session, returning it with any secondary warnings."""


@dataclass
class HttpxTimerApiClient:
    """Timer API client implemented with httpx."""

    base_url: str
    api_token: str
    owner_id: UUID
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, api_token: str, owner_id: UUID
    ) -> "HttpxTimerApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_token=api_token,
            owner_id=owner_id,
            http_client=httpx.AsyncClient(),
        )

    async def get_active(self) -> TimerSession | None:
        """Fetch the active session snapshot."""
        payload = await self._request("GET", "/active")
        if payload is None:
            return None
        return SessionResponse.model_validate(payload).to_session()

    async def start(  # noqa: PLR0913
        self,
        session_type: SessionType,
        duration_minutes: int,
        task_id: UUID | None = None,
        project: str | None = None,
        notes: str | None = None,
    ) -> TimerSession:
        """Start a session through the API."""
        body: dict[str, object] = {
            "type": session_type.value,
            "duration_minutes": duration_minutes,
        }
        if task_id is not None:
            body["task_id"] = str(task_id)
        if project is not None:
            body["project"] = project
        if notes is not None:
            body["notes"] = notes
        payload = await self._request("POST", "/start", json=body)
        return SessionResponse.model_validate(payload).to_session()

    async def pause(self) -> TimerSession:
        """Pause the running session."""
        payload = await self._request("POST", "/pause")
        return SessionResponse.model_validate(payload).to_session()

    async def resume(self) -> TimerSession:
        """Resume the paused session."""
        payload = await self._request("POST", "/resume")
        return SessionResponse.model_validate(payload).to_session()

    async def complete(self, session_id: UUID) -> CompletionResult:
        """Complete a session, keeping task update warnings."""
        payload = await self._request("POST", f"/complete/{session_id}")
        return CompletedSessionResponse.model_validate(payload).to_result()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, json: dict[str, object] | None = None
    ) -> object:
        response = await self.http_client.request(
            method,
            f"{self.base_url}/api/timer{path}",
            json=json,
            headers={
                "X-Api-Token": self.api_token,
                "X-Owner-Id": str(self.owner_id),
            },
            timeout=10,
        )
        error = _ERRORS_BY_STATUS.get(response.status_code)
        if error is not None:
            raise error(_detail(response))
        response.raise_for_status()
        return response.json()


def _detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return response.text
