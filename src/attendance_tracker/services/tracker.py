"""Per-user attendance tracker backing an active-session view."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from attendance_tracker.domain.errors import AttendanceError, CaptureFailure
from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    DailySummary,
    OpenSession,
)
from attendance_tracker.domain.timing import local_day
from attendance_tracker.services.attendance import (
    AttendanceService,
    summarize_day,
    utc_now,
)
from attendance_tracker.services.ticker import ElapsedTicker

_logger = logging.getLogger(__name__)


class PhotoSource(Protocol):
    """A camera or other device producing an image data URL."""

    async def capture(self) -> str:
        """Capture a photo, raising CaptureFailure when unavailable."""


@dataclass
class SessionTracker:
    """Holds one user's NoActiveSession / ActiveSession state for a view.

    State only changes after the store confirms a write; a failed check-in or
    check-out leaves ``active`` and ``sessions`` as they were. While a session
    is open an ``ElapsedTicker`` pushes fresh summaries to ``on_tick``.
    Store calls run in a worker thread so the ticker keeps running.
    """

    service: AttendanceService
    user_id: UUID
    timezone_name: str
    interval: float = 1.0
    clock: Callable[[], datetime] = utc_now
    on_tick: Callable[[DailySummary], None] | None = None
    photo_source: PhotoSource | None = None
    day: date | None = field(default=None, init=False)
    sessions: list[AttendanceSession] = field(default_factory=list, init=False)
    active: OpenSession | None = field(default=None, init=False)
    _ticker: ElapsedTicker = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._tz = ZoneInfo(self.timezone_name)
        self._ticker = ElapsedTicker(interval=self.interval, callback=self._emit)

    async def __aenter__(self) -> "SessionTracker":
        await self.refresh()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        self.close()

    @property
    def is_checked_in(self) -> bool:
        return self.active is not None

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    async def refresh(self) -> DailySummary:
        """Reload today's sessions and the open session from the store."""
        day = local_day(self.clock(), self._tz)
        sessions = await asyncio.to_thread(
            self.service.list_daily_sessions, self.user_id, day
        )
        active = await asyncio.to_thread(self.service.get_active_session, self.user_id)
        self.day = day
        self.sessions = sessions
        self.active = active
        self._sync_ticker()
        return self.snapshot()

    async def check_in(self) -> OpenSession:
        """Capture a photo if configured and open a session."""
        photo = await self._capture()
        session = await asyncio.to_thread(
            self.service.check_in,
            self.user_id,
            self.timezone_name,
            now=self.clock(),
            photo=photo,
        )
        if session.day == self.day:
            self.sessions = [*self.sessions, session]
        else:
            self.day = session.day
            self.sessions = await self._reload_day(session)
        self.active = session
        self._sync_ticker()
        return session

    async def check_out(self) -> ClosedSession:
        """Capture a photo if configured and close the open session."""
        photo = await self._capture()
        closed = await asyncio.to_thread(
            self.service.check_out,
            self.user_id,
            now=self.clock(),
            photo=photo,
        )
        self.sessions = [
            closed if session.id == closed.id else session for session in self.sessions
        ]
        self.active = None
        self._sync_ticker()
        self._emit()
        return closed

    def snapshot(self) -> DailySummary:
        """Return the summary as of the tracker clock's current instant."""
        now = self.clock()
        day = self.day or local_day(now, self._tz)
        return summarize_day(
            self.user_id, day, self.sessions, self._tz, now, open_session=self.active
        )

    def close(self) -> None:
        """Tear down the view: stop the ticker."""
        self._ticker.cancel()

    def _sync_ticker(self) -> None:
        if self.active is None:
            self._ticker.cancel()
        else:
            self._ticker.start()

    def _emit(self) -> None:
        if self.on_tick is None:
            return
        try:
            self.on_tick(self.snapshot())
        except Exception:
            # Runs after a confirmed store write.
            _logger.exception("Tracker tick callback failed for user=%s", self.user_id)

    async def _reload_day(self, session: OpenSession) -> list[AttendanceSession]:
        """Load the new day's sessions, falling back to just ``session``."""
        try:
            sessions = await asyncio.to_thread(
                self.service.list_daily_sessions, self.user_id, session.day
            )
        except AttendanceError:
            _logger.warning("Could not reload sessions for %s", session.day)
            return [session]
        if all(existing.id != session.id for existing in sessions):
            sessions = [*sessions, session]
        return sessions

    async def _capture(self) -> str | None:
        if self.photo_source is None:
            return None
        try:
            return await self.photo_source.capture()
        except OSError as exc:
            _logger.warning("Photo capture failed for user=%s", self.user_id)
            raise CaptureFailure("Failed to access camera.") from exc
