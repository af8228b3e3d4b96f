"""Supabase-backed attendance session repository."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from attendance_tracker.adapters.supabase_queries import execute_query
from attendance_tracker.domain.errors import AlreadyCheckedIn, PersistenceFailure
from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    OpenSession,
)
from attendance_tracker.domain.timing import duration_minutes
from attendance_tracker.services.attendance import AttendanceRepository

_TABLE = "attendance_sessions"
_COLUMNS = "id, user_id, date, check_in_time, check_out_time, duration_minutes"
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseAttendanceRepository(AttendanceRepository):
    """Supabase implementation for attendance sessions."""

    client: Client

    def create_session(
        self,
        user_id: UUID,
        day: date,
        check_in_time: datetime,
        check_in_photo: str | None,
    ) -> OpenSession:
        """Insert an open session row and return it."""
        query = self.client.table(_TABLE).insert(
            {
                "user_id": str(user_id),
                "date": day.isoformat(),
                "check_in_time": check_in_time.isoformat(),
                "check_in_photo": check_in_photo,
            }
        )
        try:
            response = query.execute()
        except APIError as exc:
            # Partial unique index on open sessions per user.
            if exc.code == _UNIQUE_VIOLATION:
                raise AlreadyCheckedIn() from exc
            raise PersistenceFailure(f"Failed to create session: {exc.message}") from exc
        except httpx.HTTPError as exc:
            raise PersistenceFailure("Failed to create session") from exc
        if not response.data:
            raise PersistenceFailure("Failed to create session")
        session = _parse_row(response.data[0])
        if not isinstance(session, OpenSession):
            raise PersistenceFailure("Created session is not open")
        return session

    def close_session(
        self,
        session_id: UUID,
        check_out_time: datetime,
        duration_minutes: int,
        check_out_photo: str | None,
    ) -> ClosedSession | None:
        """Close the session only if its row is still open."""
        query = (
            self.client.table(_TABLE)
            .update(
                {
                    "check_out_time": check_out_time.isoformat(),
                    "duration_minutes": duration_minutes,
                    "check_out_photo": check_out_photo,
                }
            )
            .eq("id", str(session_id))
            .is_("check_out_time", "null")
        )
        response = execute_query(query, "close session")
        if not response.data:
            return None
        session = _parse_row(response.data[0])
        if not isinstance(session, ClosedSession):
            raise PersistenceFailure("Closed session has no check-out time")
        return session

    def get_open_session(self, user_id: UUID) -> OpenSession | None:
        """Return the user's most recent open session."""
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .is_("check_out_time", "null")
            .order("check_in_time", desc=True)
            .limit(1)
        )
        response = execute_query(query, "load open session")
        if not response.data:
            return None
        session = _parse_row(response.data[0])
        return session if isinstance(session, OpenSession) else None

    def list_sessions(self, user_id: UUID, day: date) -> list[AttendanceSession]:
        """Return a user's sessions for a day, earliest first."""
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .order("check_in_time", desc=False)
        )
        response = execute_query(query, "list sessions")
        return [_parse_row(row) for row in response.data or []]

    def list_sessions_between(
        self, start: date, end: date
    ) -> list[AttendanceSession]:
        """Return all users' sessions dated within [start, end]."""
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
        )
        response = execute_query(query, "list sessions")
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, Any]) -> AttendanceSession:
    check_in_time = datetime.fromisoformat(row["check_in_time"])
    common = {
        "id": UUID(row["id"]),
        "user_id": UUID(row["user_id"]),
        "day": date.fromisoformat(row["date"]),
        "check_in_time": check_in_time,
        "check_in_photo": row.get("check_in_photo"),
    }
    check_out_raw = row.get("check_out_time")
    if not check_out_raw:
        return OpenSession(**common)
    check_out_time = datetime.fromisoformat(check_out_raw)
    stored_minutes = row.get("duration_minutes")
    return ClosedSession(
        **common,
        check_out_time=check_out_time,
        duration_minutes=int(stored_minutes)
        if stored_minutes is not None
        else duration_minutes(check_in_time, check_out_time),
        check_out_photo=row.get("check_out_photo"),
    )
