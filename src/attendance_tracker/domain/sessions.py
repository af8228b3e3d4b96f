"""Domain models for attendance sessions."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class OpenSession:
    """A session that has been checked into but not out of."""

    id: UUID
    user_id: UUID
    day: date
    check_in_time: datetime
    check_in_photo: str | None = None

    @property
    def is_open(self) -> bool:
        return True


@dataclass(frozen=True)
class ClosedSession:
    """A finished session with its stored duration."""

    id: UUID
    user_id: UUID
    day: date
    check_in_time: datetime
    check_out_time: datetime
    duration_minutes: int
    check_in_photo: str | None = None
    check_out_photo: str | None = None

    @property
    def is_open(self) -> bool:
        return False


AttendanceSession = OpenSession | ClosedSession


@dataclass(frozen=True)
class SessionView:
    """Display row for one session of a day."""

    index: int
    label: str
    session_id: UUID
    started_at: str
    ended_at: str | None
    duration: str
    is_open: bool


@dataclass(frozen=True)
class DailySummary:
    """Sessions and live totals for one user on one day."""

    user_id: UUID
    day: date
    sessions: list[AttendanceSession]
    views: list[SessionView]
    total_minutes: int
    active_session: OpenSession | None
    elapsed: str

    @property
    def hours(self) -> int:
        return self.total_minutes // 60

    @property
    def minutes(self) -> int:
        return self.total_minutes % 60

    @property
    def total_label(self) -> str:
        return f"{self.hours}h {self.minutes}m"


@dataclass(frozen=True)
class DayActivity:
    """Team-wide attendance for one calendar day."""

    day: date
    hours: float
    members: int
