"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import create_client

from attendance_tracker.adapters.supabase_attendance_repository import (
    SupabaseAttendanceRepository,
)
from attendance_tracker.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from attendance_tracker.config import Settings
from attendance_tracker.domain.sessions import DailySummary
from attendance_tracker.services.admin import AdminService
from attendance_tracker.services.analytics import AnalyticsService
from attendance_tracker.services.attendance import AttendanceService
from attendance_tracker.services.tracker import PhotoSource, SessionTracker
from attendance_tracker.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    attendance_service: AttendanceService
    analytics_service: AnalyticsService
    user_settings_service: UserSettingsService
    admin_service: AdminService

    def tracker_for(
        self,
        user_id: UUID,
        on_tick: Callable[[DailySummary], None] | None = None,
        photo_source: PhotoSource | None = None,
    ) -> SessionTracker:
        """Build a tracker for one user's active-session view."""
        return SessionTracker(
            service=self.attendance_service,
            user_id=user_id,
            timezone_name=self.user_settings_service.get_timezone(user_id),
            interval=self.settings.ticker_interval_seconds,
            on_tick=on_tick,
            photo_source=photo_source,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    attendance_repository = SupabaseAttendanceRepository(supabase_client)
    user_settings_repository = SupabaseUserSettingsRepository(supabase_client)
    attendance_service = AttendanceService(
        attendance_repository,
        require_photo=resolved_settings.require_photo,
        max_photo_bytes=resolved_settings.max_photo_bytes,
    )
    analytics_service = AnalyticsService(attendance_repository)
    user_settings_service = UserSettingsService(
        user_settings_repository,
        default_timezone=resolved_settings.default_timezone,
    )
    admin_service = AdminService(
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        user_settings_service=user_settings_service,
    )
    return AppContainer(
        settings=resolved_settings,
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        user_settings_service=user_settings_service,
        admin_service=admin_service,
    )
