"""Shared error mapping for Supabase queries."""

from typing import Any

import httpx
from postgrest.exceptions import APIError

from attendance_tracker.domain.errors import PersistenceFailure


def execute_query(query: Any, action: str) -> Any:
    """Run a query builder, reporting store errors as ``PersistenceFailure``."""
    try:
        return query.execute()
    except APIError as exc:
        raise PersistenceFailure(f"Failed to {action}: {exc.message}") from exc
    except httpx.HTTPError as exc:
        raise PersistenceFailure(f"Failed to {action}") from exc
