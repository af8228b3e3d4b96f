"""Error kinds raised by the attendance tracker."""

from uuid import UUID


class AttendanceError(Exception):
    """Base class for attendance errors reported to the caller."""

    kind = "attendance_error"


class PersistenceFailure(AttendanceError):
    """The store did not confirm a read or write; safe to retry."""

    kind = "persistence_failure"


class PreconditionViolation(AttendanceError):
    """The requested transition is not valid in the current state."""

    kind = "precondition_violation"


class AlreadyCheckedIn(PreconditionViolation):
    """The user already has an open session."""

    kind = "already_checked_in"

    def __init__(self, session_id: UUID | None = None) -> None:
        super().__init__("User already has an open session; check out first.")
        self.session_id = session_id


class NoActiveSession(PreconditionViolation):
    """The user has no open session to close."""

    kind = "no_active_session"

    def __init__(self) -> None:
        super().__init__("User has no open session.")


class InvalidCheckOutTime(PreconditionViolation):
    """Check-out instant is not after the check-in instant."""

    kind = "invalid_check_out_time"


class CaptureFailure(AttendanceError):
    """The photo could not be captured or is unusable."""

    kind = "capture_failure"
