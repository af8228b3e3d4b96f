"""FastAPI application factory."""

import logging
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from attendance_tracker.api.admin import router as admin_router
from attendance_tracker.api.models import PhotoPayload, TimezonePayload
from attendance_tracker.app_logging import configure_logging
from attendance_tracker.containers import AppContainer
from attendance_tracker.domain.errors import (
    AttendanceError,
    CaptureFailure,
    PersistenceFailure,
    PreconditionViolation,
)
from attendance_tracker.serialization import serialize_session, serialize_summary

_UNPROCESSABLE = 422


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Attendance Tracker")
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(AttendanceError)
    async def attendance_error_handler(
        request: Request, exc: AttendanceError
    ) -> JSONResponse:
        if isinstance(exc, PersistenceFailure):
            logger.warning("Store failure on %s: %s", request.url.path, exc)
        else:
            logger.info("Rejected %s: %s", request.url.path, exc.kind)
        return JSONResponse(
            status_code=_status_for(exc),
            content={"detail": str(exc), "error": exc.kind},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/attendance/check-in", status_code=status.HTTP_201_CREATED)
    def check_in(
        payload: PhotoPayload,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Open a session for the calling user."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        timezone_name = state_container.user_settings_service.get_timezone(user_id)
        session = state_container.attendance_service.check_in(
            user_id, timezone_name, photo=payload.photo
        )
        return serialize_session(session)

    @app.post("/attendance/check-out")
    def check_out(
        payload: PhotoPayload,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Close the calling user's open session."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        session = state_container.attendance_service.check_out(
            user_id, photo=payload.photo
        )
        return serialize_session(session)

    @app.get("/attendance/active")
    def active_session(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return the calling user's open session, if any."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        session = state_container.attendance_service.get_active_session(user_id)
        return {"session": serialize_session(session) if session else None}

    @app.get("/attendance/today")
    def today(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return today's sessions and live totals in the user's timezone."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        timezone_name = state_container.user_settings_service.get_timezone(user_id)
        summary = state_container.attendance_service.get_daily_summary(
            user_id, timezone_name
        )
        return serialize_summary(summary)

    @app.get("/attendance/days/{day}")
    def day_summary(
        day: date, request: Request, x_user_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return sessions and totals for a given day."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        timezone_name = state_container.user_settings_service.get_timezone(user_id)
        summary = state_container.attendance_service.get_daily_summary(
            user_id, timezone_name, day=day
        )
        return serialize_summary(summary)

    @app.get("/settings/timezone")
    def get_timezone(
        request: Request, x_user_id: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Return the calling user's timezone."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        return {
            "timezone": state_container.user_settings_service.get_timezone(user_id)
        }

    @app.put("/settings/timezone")
    def set_timezone(
        payload: TimezonePayload,
        request: Request,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, str]:
        """Update the calling user's timezone."""
        state_container: AppContainer = request.app.state.container
        user_id = _parse_user_id(x_user_id)
        try:
            timezone_name = state_container.user_settings_service.set_timezone(
                user_id, payload.timezone
            )
        except ValueError as exc:
            raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
        return {"timezone": timezone_name}

    return app


def _parse_user_id(raw: str | None) -> UUID:
    """Return the user id supplied by the auth gateway."""
    if not raw:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(raw)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


def _status_for(exc: AttendanceError) -> int:
    if isinstance(exc, PreconditionViolation):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, CaptureFailure):
        return _UNPROCESSABLE
    if isinstance(exc, PersistenceFailure):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR
