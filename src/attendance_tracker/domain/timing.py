"""Pure time computations for attendance sessions."""

from collections.abc import Iterable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    OpenSession,
    SessionView,
)

SECONDS_PER_MINUTE = 60
MINUTES_PER_HOUR = 60
SECONDS_PER_HOUR = SECONDS_PER_MINUTE * MINUTES_PER_HOUR
IN_PROGRESS_LABEL = "In Progress"


def elapsed_seconds(check_in_time: datetime, now: datetime) -> int:
    """Return whole seconds between check-in and now, never negative."""
    seconds = int((now - check_in_time).total_seconds())
    return max(seconds, 0)


def duration_minutes(check_in_time: datetime, check_out_time: datetime) -> int:
    """Return whole minutes worked, floored and clamped to zero."""
    return elapsed_seconds(check_in_time, check_out_time) // SECONDS_PER_MINUTE


def format_elapsed(check_in_time: datetime, now: datetime) -> str:
    """Format the running time of an open session as HH:MM:SS."""
    total = elapsed_seconds(check_in_time, now)
    hours, remainder = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def split_minutes(total_minutes: int) -> tuple[int, int]:
    """Split a minute count into (hours, minutes)."""
    return divmod(total_minutes, MINUTES_PER_HOUR)


def format_duration(minutes: int) -> str:
    """Format a stored duration as '1h 15m'."""
    hours, rest = split_minutes(minutes)
    return f"{hours}h {rest}m"


def local_day(instant: datetime, tz: ZoneInfo) -> date:
    """Return the calendar day of an instant in the given timezone."""
    return instant.astimezone(tz).date()


def order_sessions(
    sessions: Iterable[AttendanceSession],
) -> list[AttendanceSession]:
    """Sort sessions by check-in time, earliest first."""
    return sorted(sessions, key=lambda session: session.check_in_time)


def find_open_session(
    sessions: Iterable[AttendanceSession],
) -> OpenSession | None:
    for session in sessions:
        if isinstance(session, OpenSession):
            return session
    return None


def daily_total_minutes(sessions: Iterable[AttendanceSession], now: datetime) -> int:
    """Sum closed durations plus the live minutes of an open session."""
    total = 0
    for session in sessions:
        if isinstance(session, ClosedSession):
            total += session.duration_minutes
        else:
            total += duration_minutes(session.check_in_time, now)
    return total


def format_clock(instant: datetime, tz: ZoneInfo) -> str:
    """Format an instant as a local '9:05 AM' clock time."""
    local = instant.astimezone(tz)
    return local.strftime("%I:%M %p").lstrip("0")


def session_views(
    sessions: Iterable[AttendanceSession], tz: ZoneInfo
) -> list[SessionView]:
    """Build positional display rows, labelled Session 1, Session 2, ..."""
    views = []
    for index, session in enumerate(order_sessions(sessions), start=1):
        if isinstance(session, ClosedSession):
            ended_at = format_clock(session.check_out_time, tz)
            duration = format_duration(session.duration_minutes)
        else:
            ended_at = None
            duration = IN_PROGRESS_LABEL
        views.append(
            SessionView(
                index=index,
                label=f"Session {index}",
                session_id=session.id,
                started_at=format_clock(session.check_in_time, tz),
                ended_at=ended_at,
                duration=duration,
                is_open=session.is_open,
            )
        )
    return views
