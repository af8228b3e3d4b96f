"""Shared test fixtures."""

import base64
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from attendance_tracker.config import Settings
from attendance_tracker.containers import AppContainer
from attendance_tracker.domain.errors import AlreadyCheckedIn, PersistenceFailure
from attendance_tracker.domain.photos import detect_mime_type
from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    OpenSession,
)
from attendance_tracker.services.admin import AdminService
from attendance_tracker.services.analytics import AnalyticsService
from attendance_tracker.services.attendance import (
    AttendanceRepository,
    AttendanceService,
)
from attendance_tracker.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)


def to_data_url(image_bytes: bytes) -> str:
    """Encode raw image bytes as a base64 data URL."""
    mime_type = detect_mime_type(image_bytes) or "image/jpeg"
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


JPEG_PHOTO = to_data_url(b"\xff\xd8\xff\xe0" + b"\x00" * 32)
SERVICE_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
    "c2lnbmF0dXJl"
)


@dataclass
class InMemoryAttendanceRepository(AttendanceRepository):
    """In-memory attendance repository for tests.

    ``fail_writes`` makes inserts and updates raise ``PersistenceFailure``.
    ``stale_reads`` hides open sessions from ``get_open_session`` to mimic a
    second client racing past the precondition read.
    """

    sessions: dict[UUID, AttendanceSession] = field(default_factory=dict)
    fail_writes: bool = False
    stale_reads: bool = False
    writes: int = 0

    def create_session(
        self,
        user_id: UUID,
        day: date,
        check_in_time: datetime,
        check_in_photo: str | None,
    ) -> OpenSession:
        if self.fail_writes:
            raise PersistenceFailure("Failed to create session")
        for existing in self.sessions.values():
            if existing.user_id == user_id and isinstance(existing, OpenSession):
                raise AlreadyCheckedIn()
        session = OpenSession(
            id=uuid4(),
            user_id=user_id,
            day=day,
            check_in_time=check_in_time,
            check_in_photo=check_in_photo,
        )
        self.sessions[session.id] = session
        self.writes += 1
        return session

    def close_session(
        self,
        session_id: UUID,
        check_out_time: datetime,
        duration_minutes: int,
        check_out_photo: str | None,
    ) -> ClosedSession | None:
        if self.fail_writes:
            raise PersistenceFailure("Failed to close session")
        current = self.sessions.get(session_id)
        if not isinstance(current, OpenSession):
            return None
        closed = ClosedSession(
            id=current.id,
            user_id=current.user_id,
            day=current.day,
            check_in_time=current.check_in_time,
            check_out_time=check_out_time,
            duration_minutes=duration_minutes,
            check_in_photo=current.check_in_photo,
            check_out_photo=check_out_photo,
        )
        self.sessions[session_id] = closed
        self.writes += 1
        return closed

    def get_open_session(self, user_id: UUID) -> OpenSession | None:
        if self.stale_reads:
            return None
        for session in self.sessions.values():
            if session.user_id == user_id and isinstance(session, OpenSession):
                return session
        return None

    def list_sessions(self, user_id: UUID, day: date) -> list[AttendanceSession]:
        matches = [
            session
            for session in self.sessions.values()
            if session.user_id == user_id and session.day == day
        ]
        return sorted(matches, key=lambda session: session.check_in_time)

    def list_sessions_between(
        self, start: date, end: date
    ) -> list[AttendanceSession]:
        return [
            session
            for session in self.sessions.values()
            if start <= session.day <= end
        ]


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    timezones: dict[UUID, str] = field(default_factory=dict)

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)

    def set_timezone(self, user_id: UUID, timezone_name: str) -> None:
        self.timezones[user_id] = timezone_name


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = field(
        default_factory=lambda: datetime(2026, 1, 12, 9, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    """Return an instant on 2026-01-12 UTC."""
    return datetime(2026, 1, 12, hour, minute, second, tzinfo=UTC)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=SERVICE_KEY,
        admin_token="admin-token",
        ticker_interval_seconds=0.01,
    )


@pytest.fixture
def attendance_repository() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def user_settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def container(
    settings: Settings,
    attendance_repository: InMemoryAttendanceRepository,
    user_settings_repository: InMemoryUserSettingsRepository,
) -> AppContainer:
    attendance_service = AttendanceService(
        attendance_repository,
        require_photo=settings.require_photo,
        max_photo_bytes=settings.max_photo_bytes,
    )
    analytics_service = AnalyticsService(attendance_repository)
    user_settings_service = UserSettingsService(
        user_settings_repository, default_timezone=settings.default_timezone
    )
    admin_service = AdminService(
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        user_settings_service=user_settings_service,
    )
    return AppContainer(
        settings=settings,
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        user_settings_service=user_settings_service,
        admin_service=admin_service,
    )
