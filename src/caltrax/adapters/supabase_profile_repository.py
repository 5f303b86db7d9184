"""Supabase repository for user profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from caltrax.services.sync import ProfileRemoteRepository


@dataclass
class SupabaseProfileRepository(ProfileRemoteRepository):
    """Supabase implementation for profile rows."""

    client: Client

    def upsert_profile(self, user_id: str, profile: dict[str, object]) -> None:
        """Insert or update the user's profile row."""
        self.client.table("profiles").upsert(
            {
                **profile,
                "user_id": user_id,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the stored profile row for a user."""
        response = (
            self.client.table("profiles")
            .select(
                "height_in, weight_kg, age_years, gender, activity_level, goals, "
                "dietary_restrictions, calories, macros"
            )
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]
