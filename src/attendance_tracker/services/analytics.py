"""Team-wide attendance analytics."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from uuid import UUID

from attendance_tracker.domain.sessions import ClosedSession, DayActivity
from attendance_tracker.services.attendance import AttendanceRepository

MAX_RANGE_DAYS = 90


@dataclass
class AnalyticsService:
    """Aggregates worked hours and active members per calendar day."""

    repository: AttendanceRepository

    def daily_activity(self, days: int, today: date) -> list[DayActivity]:
        """Return one entry per day for the ``days`` days ending ``today``.

        Hours count closed sessions only and are rounded to one decimal.
        """
        if not 1 <= days <= MAX_RANGE_DAYS:
            raise ValueError(f"days must be between 1 and {MAX_RANGE_DAYS}")
        start = today - timedelta(days=days - 1)
        sessions = self.repository.list_sessions_between(start, today)

        minutes_by_day: dict[date, int] = defaultdict(int)
        members_by_day: dict[date, set[UUID]] = defaultdict(set)
        for session in sessions:
            members_by_day[session.day].add(session.user_id)
            if isinstance(session, ClosedSession):
                minutes_by_day[session.day] += session.duration_minutes

        activity = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            activity.append(
                DayActivity(
                    day=day,
                    hours=round(minutes_by_day.get(day, 0) / 60, 1),
                    members=len(members_by_day.get(day, set())),
                )
            )
        return activity
