"""Local countdown display derived from server snapshots.

The server never pushes ticks. A client fetches one snapshot, reconciles it
against its own clock and ticks locally until the next transition.
"""

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from focus_timer.client.api_client import TimerApiClient
from focus_timer.domain.errors import NotFoundError, StateConflictError, TimerError
from focus_timer.domain.sessions import (
    DEFAULT_DURATION_MINUTES,
    SessionType,
    TimerSession,
)
from focus_timer.services.reconciliation import (
    format_clock,
    paused_time_left,
    remaining_from_running,
)

logger = logging.getLogger(__name__)


class DisplayMode(str, Enum):
    """What the countdown display is showing."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETING = "completing"


@dataclass(frozen=True)
class CountdownView:
    """State to render for the timer display."""

    mode: DisplayMode
    session_type: SessionType
    remaining_seconds: int
    session_id: UUID | None = None

    @property
    def label(self) -> str:
        return format_clock(self.remaining_seconds)


def idle_view(session_type: SessionType = SessionType.FOCUS) -> CountdownView:
    """Return the idle display for a session type with its default duration."""
    return CountdownView(
        mode=DisplayMode.IDLE,
        session_type=session_type,
        remaining_seconds=DEFAULT_DURATION_MINUTES[session_type] * 60,
    )


class CountdownHandle:
    """Cancellable periodic tick task scoped to one session id."""

    def __init__(  # noqa: PLR0913
        self,
        session_id: UUID,
        remaining_seconds: int,
        on_tick: Callable[[int], None],
        on_zero: Callable[[UUID], Awaitable[None]],
        tick_interval: float = 1.0,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session_id = session_id
        self.remaining_seconds = remaining_seconds
        self._on_tick = on_tick
        self._on_zero = on_zero
        self._tick_interval = tick_interval
        self._monotonic = monotonic
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        """Stop ticking. Safe to call from the tick task itself."""
        if self._task is None or self._task.done():
            return
        if self._task is asyncio.current_task():
            return
        self._task.cancel()

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_done(self, callback: Callable[["CountdownHandle"], None]) -> None:
        """Call ``callback`` with this handle once the tick task has ended."""
        if self._task is None or self._task.done():
            callback(self)
            return
        self._task.add_done_callback(lambda _task: callback(self))

    async def wait(self) -> None:
        """Wait until the tick task ends, either at zero or by cancellation."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _run(self) -> None:
        initial = self.remaining_seconds
        anchor = self._monotonic()
        while True:
            elapsed = math.floor(self._monotonic() - anchor)
            self.remaining_seconds = max(0, initial - elapsed)
            self._on_tick(self.remaining_seconds)
            if self.remaining_seconds == 0:
                await self._on_zero(self.session_id)
                return
            await self._sleep(self._tick_interval)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ActiveSessionResolver:
    """Client-side controller that keeps a display in sync with the server."""

    api: TimerApiClient
    on_render: Callable[[CountdownView], None] = lambda view: None
    wall_clock: Callable[[], datetime] = field(default=_utc_now)
    monotonic: Callable[[], float] = field(default=time.monotonic)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    tick_interval: float = 1.0
    view: CountdownView = field(default_factory=idle_view, init=False)
    session: TimerSession | None = field(default=None, init=False)
    handle: CountdownHandle | None = field(default=None, init=False)
    _draining: set[CountdownHandle] = field(default_factory=set, init=False)

    async def load(self) -> CountdownView:
        """Fetch the active session and derive the display from it."""
        self._teardown()
        session = await self.api.get_active()
        return await self._show(session)

    async def start(
        self,
        session_type: SessionType | None = None,
        duration_minutes: int | None = None,
        task_id: UUID | None = None,
    ) -> CountdownView:
        """Start a new session, replacing any current one."""
        resolved_type = session_type or self.view.session_type
        duration = duration_minutes or DEFAULT_DURATION_MINUTES[resolved_type]
        return await self._transition(
            lambda: self.api.start(resolved_type, duration, task_id=task_id)
        )

    async def pause(self) -> CountdownView:
        """Stop ticking locally and pause on the server."""
        return await self._transition(self.api.pause)

    async def resume(self) -> CountdownView:
        """Resume on the server and tick from the returned snapshot."""
        return await self._transition(self.api.resume)

    async def stop(self) -> CountdownView:
        """Complete the current session explicitly."""
        if self.session is None:
            return self.view
        return await self._finish(self.session)

    def switch_type(self, session_type: SessionType) -> CountdownView:
        """Show the idle display for another type; ignored while a session exists."""
        if self.session is not None:
            return self.view
        return self._render(idle_view(session_type))

    def reset(self) -> CountdownView:
        """Stop ticking and show the current type's default duration.

        Local only: the server session is left as is and ``stop()`` still
        completes it.
        """
        self._teardown()
        return self._render(idle_view(self.view.session_type))

    def close(self) -> None:
        """Tear down local ticking when the view goes away."""
        self._teardown()

    async def _show(self, session: TimerSession | None) -> CountdownView:
        if session is None or session.completed:
            self.session = None
            return self._render(idle_view(self.view.session_type))
        if session.is_running:
            remaining = remaining_from_running(
                session.start_time, session.duration_minutes, self.wall_clock()
            )
            if remaining == 0:
                return await self._finish(session)
            self.session = session
            self._start_ticking(session, remaining)
            return self.view
        self.session = session
        return self._render(
            CountdownView(
                mode=DisplayMode.PAUSED,
                session_type=session.type,
                remaining_seconds=paused_time_left(session),
                session_id=session.id,
            )
        )

    def _start_ticking(self, session: TimerSession, remaining: int) -> None:
        def on_tick(seconds: int) -> None:
            self._render(
                CountdownView(
                    mode=DisplayMode.RUNNING,
                    session_type=session.type,
                    remaining_seconds=seconds,
                    session_id=session.id,
                )
            )

        self.handle = CountdownHandle(
            session_id=session.id,
            remaining_seconds=remaining,
            on_tick=on_tick,
            on_zero=self._on_zero,
            tick_interval=self.tick_interval,
            monotonic=self.monotonic,
            sleep=self.sleep,
        )
        on_tick(remaining)
        self.handle.start()

    async def _transition(
        self, call: Callable[[], Awaitable[TimerSession]]
    ) -> CountdownView:
        self._teardown()
        try:
            session = await call()
        except TimerError:
            await self.load()
            raise
        return await self._show(session)

    async def _on_zero(self, session_id: UUID) -> None:
        session = self.session
        if session is None or session.id != session_id:
            return
        try:
            await self._finish(session)
        except Exception:
            logger.exception(
                "Failed to complete session at zero",
                extra={"session_id": str(session_id)},
            )

    async def _finish(self, session: TimerSession) -> CountdownView:
        """Completion path shared by explicit stop and countdown expiry.

        When the server cannot be reached the session stays tracked behind a
        ``COMPLETING`` view, so ``stop()`` or ``load()`` can settle it later.
        """
        self._teardown()
        try:
            result = await self.api.complete(session.id)
        except (NotFoundError, StateConflictError):
            logger.info(
                "Session was already completed elsewhere",
                extra={"session_id": str(session.id)},
            )
        except Exception:
            self.session = session
            self._render(
                CountdownView(
                    mode=DisplayMode.COMPLETING,
                    session_type=session.type,
                    remaining_seconds=0,
                    session_id=session.id,
                )
            )
            raise
        else:
            for warning in result.warnings:
                logger.warning(
                    warning.message,
                    extra={"session_id": str(session.id), "code": warning.code},
                )
        self.session = None
        return self._render(idle_view(session.type))

    def _teardown(self) -> None:
        if self.handle is None:
            return
        handle, self.handle = self.handle, None
        handle.cancel()
        if handle.active:
            self._draining.add(handle)
            handle.on_done(self._draining.discard)

    def _render(self, view: CountdownView) -> CountdownView:
        self.view = view
        self.on_render(view)
        return view
