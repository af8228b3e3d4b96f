"""JSON-ready representations of attendance records."""

from attendance_tracker.domain.sessions import (
    AttendanceSession,
    ClosedSession,
    DailySummary,
    DayActivity,
)


def serialize_session(session: AttendanceSession) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": str(session.id),
        "user_id": str(session.user_id),
        "date": session.day.isoformat(),
        "check_in_time": session.check_in_time.isoformat(),
        "check_out_time": None,
        "duration_minutes": None,
        "is_open": session.is_open,
    }
    if isinstance(session, ClosedSession):
        payload["check_out_time"] = session.check_out_time.isoformat()
        payload["duration_minutes"] = session.duration_minutes
    return payload


def serialize_summary(summary: DailySummary) -> dict[str, object]:
    views = {view.session_id: view for view in summary.views}
    sessions = []
    for session in summary.sessions:
        view = views[session.id]
        sessions.append(
            {
                **serialize_session(session),
                "label": view.label,
                "started_at": view.started_at,
                "ended_at": view.ended_at,
                "duration": view.duration,
            }
        )
    return {
        "user_id": str(summary.user_id),
        "date": summary.day.isoformat(),
        "sessions": sessions,
        "total_minutes": summary.total_minutes,
        "hours": summary.hours,
        "minutes": summary.minutes,
        "total": summary.total_label,
        "is_checked_in": summary.active_session is not None,
        "active_session_id": str(summary.active_session.id)
        if summary.active_session
        else None,
        "elapsed": summary.elapsed,
    }


def serialize_activity(entry: DayActivity) -> dict[str, object]:
    return {
        "date": entry.day.isoformat(),
        "hours": entry.hours,
        "members": entry.members,
    }
