"""Admin service for attendance reporting."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from attendance_tracker.serialization import serialize_activity, serialize_summary
from attendance_tracker.services.analytics import AnalyticsService
from attendance_tracker.services.attendance import AttendanceService, utc_now
from attendance_tracker.services.user_settings import UserSettingsService


@dataclass
class AdminService:
    """Read-only views over every user's attendance."""

    attendance_service: AttendanceService
    analytics_service: AnalyticsService
    user_settings_service: UserSettingsService

    def user_day(
        self, user_id: UUID, day: date, now: datetime | None = None
    ) -> dict[str, object]:
        """Return a user's sessions and totals for a day."""
        timezone_name = self.user_settings_service.get_timezone(user_id)
        summary = self.attendance_service.get_daily_summary(
            user_id, timezone_name, day=day, now=now
        )
        return serialize_summary(summary)

    def activity(self, days: int, today: date | None = None) -> list[dict[str, object]]:
        """Return team activity for the ``days`` days ending ``today``.

        Session dates are owners' local days; ``today`` defaults to the UTC date.
        """
        resolved_today = today or utc_now().date()
        activity = self.analytics_service.daily_activity(days, resolved_today)
        return [serialize_activity(entry) for entry in activity]
