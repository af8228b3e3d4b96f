"""Supabase repository for per-user settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from attendance_tracker.adapters.supabase_queries import execute_query
from attendance_tracker.services.user_settings import UserSettingsRepository

_TABLE = "user_settings"


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    client: Client

    def get_timezone(self, user_id: UUID) -> str | None:
        query = (
            self.client.table(_TABLE)
            .select("timezone")
            .eq("user_id", str(user_id))
            .limit(1)
        )
        rows = execute_query(query, "load user timezone").data
        return rows[0].get("timezone") if rows else None

    def set_timezone(self, user_id: UUID, timezone_name: str) -> None:
        """Upsert keyed on user_id."""
        payload = {
            "user_id": str(user_id),
            "timezone": timezone_name,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        query = self.client.table(_TABLE).upsert(payload, on_conflict="user_id")
        execute_query(query, "save user timezone")
