"""Tests for the check-in / check-out lifecycle."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from attendance_tracker.domain.errors import (
    AlreadyCheckedIn,
    CaptureFailure,
    InvalidCheckOutTime,
    NoActiveSession,
    PersistenceFailure,
    PreconditionViolation,
)
from attendance_tracker.domain.sessions import ClosedSession, OpenSession
from attendance_tracker.services.attendance import AttendanceService
from tests.conftest import JPEG_PHOTO, InMemoryAttendanceRepository, at


def test_check_in_creates_open_session() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()

    session = service.check_in(user_id, "UTC", now=at(9), photo=JPEG_PHOTO)

    assert isinstance(session, OpenSession)
    assert session.check_in_time == at(9)
    assert session.day == date(2026, 1, 12)
    assert session.check_in_photo == JPEG_PHOTO
    assert service.get_active_session(user_id) == session


def test_check_in_day_follows_user_timezone() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())

    session = service.check_in(uuid4(), "America/Los_Angeles", now=at(3))

    assert session.day == date(2026, 1, 11)


def test_check_out_stores_floored_duration() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))

    closed = service.check_out(user_id, now=at(9, 45, 59))

    assert isinstance(closed, ClosedSession)
    assert closed.check_out_time == at(9, 45, 59)
    assert closed.duration_minutes == 45
    assert service.get_active_session(user_id) is None


def test_every_closed_session_duration_matches_interval() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    pairs = [(at(8), at(8, 0, 30)), (at(9), at(9, 59, 59)), (at(13), at(17, 1))]

    for start, end in pairs:
        service.check_in(user_id, "UTC", now=start)
        service.check_out(user_id, now=end)

    sessions = service.list_daily_sessions(user_id, date(2026, 1, 12))
    assert [session.duration_minutes for session in sessions] == [0, 59, 241]
    for session, (start, end) in zip(sessions, pairs, strict=True):
        expected = int((end - start).total_seconds() // 60)
        assert session.duration_minutes == expected >= 0


def test_check_out_without_check_in_fails_and_creates_nothing() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)

    with pytest.raises(PreconditionViolation):
        service.check_out(uuid4(), now=at(10))

    assert repository.sessions == {}


def test_second_check_in_is_rejected() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()
    first = service.check_in(user_id, "UTC", now=at(9))

    with pytest.raises(AlreadyCheckedIn) as excinfo:
        service.check_in(user_id, "UTC", now=at(9, 5))

    assert isinstance(excinfo.value, PreconditionViolation)
    assert excinfo.value.session_id == first.id
    assert len(repository.sessions) == 1


def test_racing_check_in_is_rejected_by_store() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))
    repository.stale_reads = True

    with pytest.raises(AlreadyCheckedIn):
        service.check_in(user_id, "UTC", now=at(9, 1))

    assert len(repository.sessions) == 1


def test_check_out_of_already_closed_row_is_rejected() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()
    session = service.check_in(user_id, "UTC", now=at(9))
    other_client = AttendanceService(repository)
    stale = repository.get_open_session(user_id)
    other_client.check_out(user_id, now=at(9, 30))

    repository.get_open_session = lambda _user_id: stale  # type: ignore[method-assign]
    with pytest.raises(NoActiveSession):
        service.check_out(user_id, now=at(9, 40))

    closed = repository.sessions[session.id]
    assert isinstance(closed, ClosedSession)
    assert closed.duration_minutes == 30


def test_check_out_must_be_after_check_in() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))

    with pytest.raises(InvalidCheckOutTime):
        service.check_out(user_id, now=at(9))

    assert service.get_active_session(user_id) is not None


def test_capture_failure_aborts_before_any_write() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository)
    user_id = uuid4()

    with pytest.raises(CaptureFailure):
        service.check_in(user_id, "UTC", now=at(9), photo="not-an-image")

    assert repository.writes == 0
    assert service.get_active_session(user_id) is None


def test_required_photo_missing_is_capture_failure() -> None:
    repository = InMemoryAttendanceRepository()
    service = AttendanceService(repository, require_photo=True)
    user_id = uuid4()
    service_without_photo = AttendanceService(repository)
    service_without_photo.check_in(user_id, "UTC", now=at(9))

    with pytest.raises(CaptureFailure):
        service.check_out(user_id, now=at(10))

    assert service.get_active_session(user_id) is not None


def test_persistence_failure_is_retryable() -> None:
    repository = InMemoryAttendanceRepository(fail_writes=True)
    service = AttendanceService(repository)
    user_id = uuid4()

    with pytest.raises(PersistenceFailure):
        service.check_in(user_id, "UTC", now=at(9))
    assert service.get_active_session(user_id) is None

    repository.fail_writes = False
    session = service.check_in(user_id, "UTC", now=at(9, 1))

    assert service.get_active_session(user_id) == session


def test_daily_summary_totals_and_labels() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))
    service.check_out(user_id, now=at(9, 30))
    service.check_in(user_id, "UTC", now=at(10))
    service.check_out(user_id, now=at(10, 45))

    summary = service.get_daily_summary(user_id, "UTC", now=at(12))

    assert summary.total_minutes == 75
    assert (summary.hours, summary.minutes) == (1, 15)
    assert summary.total_label == "1h 15m"
    assert [view.label for view in summary.views] == ["Session 1", "Session 2"]
    assert summary.active_session is None
    assert summary.elapsed == "00:00:00"


def test_daily_summary_counts_open_session_live() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))
    service.check_out(user_id, now=at(9, 30))
    opened = service.check_in(user_id, "UTC", now=at(11))

    summary = service.get_daily_summary(
        user_id, "UTC", now=at(11) + timedelta(seconds=61)
    )

    assert summary.active_session == opened
    assert summary.elapsed == "00:01:01"
    assert summary.total_minutes == 31
    assert summary.views[-1].duration == "In Progress"


def test_repeated_reads_return_same_order() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    for hour in (14, 9, 11):
        service.check_in(user_id, "UTC", now=at(hour))
        service.check_out(user_id, now=at(hour, 20))

    first = service.list_daily_sessions(user_id, date(2026, 1, 12))
    second = service.list_daily_sessions(user_id, date(2026, 1, 12))

    assert first == second
    assert [session.check_in_time.hour for session in first] == [9, 11, 14]


def test_daily_summary_carries_session_open_since_yesterday() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    opened = service.check_in(user_id, "UTC", now=at(23, 50))
    after_midnight = at(23, 50) + timedelta(minutes=20)

    summary = service.get_daily_summary(user_id, "UTC", now=after_midnight)

    assert summary.day == date(2026, 1, 13)
    assert summary.sessions == []
    assert summary.active_session == opened
    assert summary.elapsed == "00:20:00"
    assert summary.total_minutes == 0


def test_past_day_summary_does_not_carry_open_session() -> None:
    service = AttendanceService(InMemoryAttendanceRepository())
    user_id = uuid4()
    service.check_in(user_id, "UTC", now=at(9))

    summary = service.get_daily_summary(
        user_id, "UTC", day=date(2026, 1, 10), now=at(10)
    )

    assert summary.active_session is None
    assert summary.elapsed == "00:00:00"
