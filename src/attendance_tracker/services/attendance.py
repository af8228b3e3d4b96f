"""Check-in / check-out lifecycle for attendance sessions."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from attendance_tracker.domain.errors import (
    AlreadyCheckedIn,
    CaptureFailure,
    InvalidCheckOutTime,
    NoActiveSession,
)
from attendance_tracker.domain.photos import validate_photo
from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    DailySummary,
    OpenSession,
)
from attendance_tracker.domain.timing import (
    daily_total_minutes,
    duration_minutes,
    find_open_session,
    format_elapsed,
    local_day,
    order_sessions,
    session_views,
)

_logger = logging.getLogger(__name__)

DEFAULT_MAX_PHOTO_BYTES = 2_000_000


class AttendanceRepository(Protocol):
    """Persistence interface for attendance sessions."""

    def create_session(
        self,
        user_id: UUID,
        day: date,
        check_in_time: datetime,
        check_in_photo: str | None,
    ) -> OpenSession:
        """Insert an open session and return it with its generated id."""

    def close_session(
        self,
        session_id: UUID,
        check_out_time: datetime,
        duration_minutes: int,
        check_out_photo: str | None,
    ) -> ClosedSession | None:
        """Close a session if it is still open; return None otherwise."""

    def get_open_session(self, user_id: UUID) -> OpenSession | None:
        """Return the user's open session, if any."""

    def list_sessions(self, user_id: UUID, day: date) -> list[AttendanceSession]:
        """Return a user's sessions for a day ordered by check-in time."""

    def list_sessions_between(
        self, start: date, end: date
    ) -> list[AttendanceSession]:
        """Return every user's sessions with a day in [start, end]."""


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AttendanceService:
    """Session lifecycle manager: one open session per user at most."""

    repository: AttendanceRepository
    require_photo: bool = False
    max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES

    def check_in(
        self,
        user_id: UUID,
        timezone_name: str,
        now: datetime | None = None,
        photo: str | None = None,
    ) -> OpenSession:
        """Open a new session for the user.

        Raises ``CaptureFailure`` for an unusable photo before touching the
        store, and ``AlreadyCheckedIn`` when an open session exists.
        """
        checked_photo = self._check_photo(photo)
        current = now or utc_now()
        active = self.repository.get_open_session(user_id)
        if active is not None:
            _logger.info(
                "Rejected check-in: user=%s open_session=%s", user_id, active.id
            )
            raise AlreadyCheckedIn(active.id)
        day = local_day(current, ZoneInfo(timezone_name))
        session = self.repository.create_session(
            user_id=user_id,
            day=day,
            check_in_time=current,
            check_in_photo=checked_photo,
        )
        _logger.info("Checked in: user=%s session=%s day=%s", user_id, session.id, day)
        return session

    def check_out(
        self,
        user_id: UUID,
        now: datetime | None = None,
        photo: str | None = None,
    ) -> ClosedSession:
        """Close the user's open session and store its duration."""
        checked_photo = self._check_photo(photo)
        current = now or utc_now()
        active = self.repository.get_open_session(user_id)
        if active is None:
            _logger.info("Rejected check-out: user=%s has no open session", user_id)
            raise NoActiveSession()
        if current <= active.check_in_time:
            raise InvalidCheckOutTime(
                "Check-out time must be after the check-in time "
                f"{active.check_in_time.isoformat()}."
            )
        minutes = duration_minutes(active.check_in_time, current)
        closed = self.repository.close_session(
            session_id=active.id,
            check_out_time=current,
            duration_minutes=minutes,
            check_out_photo=checked_photo,
        )
        if closed is None:
            # Another client closed it between the read and the write.
            _logger.info("Session %s was already closed", active.id)
            raise NoActiveSession()
        _logger.info(
            "Checked out: user=%s session=%s minutes=%s", user_id, closed.id, minutes
        )
        return closed

    def get_active_session(self, user_id: UUID) -> OpenSession | None:
        """Return the user's open session, if any."""
        return self.repository.get_open_session(user_id)

    def list_daily_sessions(
        self, user_id: UUID, day: date
    ) -> list[AttendanceSession]:
        """Return the user's sessions for a day, earliest first."""
        return order_sessions(self.repository.list_sessions(user_id, day))

    def get_daily_summary(
        self,
        user_id: UUID,
        timezone_name: str,
        day: date | None = None,
        now: datetime | None = None,
    ) -> DailySummary:
        """Return the sessions and live totals for a day (today by default)."""
        tz = ZoneInfo(timezone_name)
        current = now or utc_now()
        today = local_day(current, tz)
        resolved_day = day or today
        sessions = self.list_daily_sessions(user_id, resolved_day)
        carried = None
        if resolved_day == today and find_open_session(sessions) is None:
            # Still open from an earlier day, e.g. across midnight.
            carried = self.repository.get_open_session(user_id)
        return summarize_day(
            user_id, resolved_day, sessions, tz, current, open_session=carried
        )

    def _check_photo(self, photo: str | None) -> str | None:
        if photo is None:
            if self.require_photo:
                raise CaptureFailure("A photo is required.")
            return None
        return validate_photo(photo, self.max_photo_bytes)


def summarize_day(
    user_id: UUID,
    day: date,
    sessions: list[AttendanceSession],
    tz: ZoneInfo,
    now: datetime,
    open_session: OpenSession | None = None,
) -> DailySummary:
    """Aggregate an ordered list of sessions for display at ``now``.

    ``open_session`` is the user's open session when it is not among
    ``sessions``; it drives the elapsed display but not the day's total.
    """
    active = find_open_session(sessions) or open_session
    return DailySummary(
        user_id=user_id,
        day=day,
        sessions=sessions,
        views=session_views(sessions, tz),
        total_minutes=daily_total_minutes(sessions, now),
        active_session=active,
        elapsed=format_elapsed(active.check_in_time, now) if active else "00:00:00",
    )
