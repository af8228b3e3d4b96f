"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from attendance_tracker.services.analytics import MAX_RANGE_DAYS

if TYPE_CHECKING:
    from attendance_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/users/{user_id}/days/{day}", dependencies=[Depends(require_admin)])
def user_day(user_id: UUID, day: date, request: Request) -> dict[str, object]:
    """Return any user's sessions and totals for a day."""
    container: AppContainer = request.app.state.container
    return container.admin_service.user_day(user_id, day)


@router.get("/activity", dependencies=[Depends(require_admin)])
def activity(
    request: Request,
    days: int = Query(default=7, ge=1, le=MAX_RANGE_DAYS),
    today: date | None = Query(default=None),
) -> dict[str, object]:
    """Return hours worked and active members per day.

    ``today`` is the last calendar day of the range; it defaults to the UTC
    date, so teams in other timezones should pass their local date.
    """
    container: AppContainer = request.app.state.container
    return {"days": container.admin_service.activity(days, today=today)}
