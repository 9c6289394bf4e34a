"""Timer session endpoints."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from focus_timer.api.auth import current_owner
from focus_timer.api.schemas import (
    CompletedSessionResponse,
    SessionPageResponse,
    SessionResponse,
    StartTimerRequest,
    StatsResponse,
)
from focus_timer.domain.sessions import SessionType
from focus_timer.domain.stats import StatsPeriod

if TYPE_CHECKING:
    from focus_timer.containers import AppContainer

router = APIRouter(prefix="/api/timer", tags=["timer"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("/start", status_code=status.HTTP_201_CREATED)
async def start_timer(
    payload: StartTimerRequest,
    request: Request,
    owner_id: UUID = Depends(current_owner),
) -> SessionResponse:
    """Start a session, closing any session still active."""
    service = _container(request).session_service
    session = service.start(
        owner_id,
        payload.type,
        payload.duration_minutes,
        task_id=payload.task_id,
        project=payload.project,
        notes=payload.notes,
    )
    return SessionResponse.from_session(session, service.clock())


@router.post("/pause")
async def pause_timer(
    request: Request, owner_id: UUID = Depends(current_owner)
) -> SessionResponse:
    """Pause the running session."""
    service = _container(request).session_service
    session = service.pause(owner_id)
    return SessionResponse.from_session(session, service.clock())


@router.post("/resume")
async def resume_timer(
    request: Request, owner_id: UUID = Depends(current_owner)
) -> SessionResponse:
    """Resume the paused session."""
    service = _container(request).session_service
    session = service.resume(owner_id)
    return SessionResponse.from_session(session, service.clock())


@router.post("/complete/{session_id}")
async def complete_timer(
    session_id: UUID, request: Request, owner_id: UUID = Depends(current_owner)
) -> CompletedSessionResponse:
    """Complete a session."""
    service = _container(request).session_service
    result = service.complete(owner_id, session_id)
    return CompletedSessionResponse.from_result(result, service.clock())


@router.get("/active")
async def active_timer(
    request: Request, owner_id: UUID = Depends(current_owner)
) -> SessionResponse | None:
    """Return the active session snapshot, or null."""
    service = _container(request).session_service
    session = service.get_active(owner_id)
    if session is None:
        return None
    return SessionResponse.from_session(session, service.clock())


@router.get("/stats")
async def timer_stats(
    request: Request,
    period: StatsPeriod = StatsPeriod.WEEK,
    tz: str | None = None,
    owner_id: UUID = Depends(current_owner),
) -> StatsResponse:
    """Return per-type and per-day statistics for a period."""
    report = _container(request).stats_service.get_stats(owner_id, period, tz)
    return StatsResponse.from_report(report)


@router.get("")
async def list_timers(  # noqa: PLR0913
    request: Request,
    page: int = 1,
    limit: int = 20,
    type: SessionType | None = None,  # noqa: A002
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    owner_id: UUID = Depends(current_owner),
) -> SessionPageResponse:
    """Return the owner's sessions, newest first."""
    service = _container(request).session_service
    result = service.list_sessions(
        owner_id,
        page=page,
        limit=limit,
        session_type=type,
        start_date=start_date,
        end_date=end_date,
    )
    return SessionPageResponse.from_page(result, service.clock())


@router.delete("/{session_id}")
async def delete_timer(
    session_id: UUID, request: Request, owner_id: UUID = Depends(current_owner)
) -> dict[str, str]:
    """Delete one of the owner's sessions."""
    _container(request).session_service.delete_session(owner_id, session_id)
    return {"message": "Timer session deleted successfully"}
