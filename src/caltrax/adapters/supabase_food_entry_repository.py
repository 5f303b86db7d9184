"""Supabase repository for food entries."""

from dataclasses import dataclass

from supabase import Client

from caltrax.services.sync import FoodEntryRemoteRepository


@dataclass
class SupabaseFoodEntryRepository(FoodEntryRemoteRepository):
    """Supabase implementation for food entry rows."""

    client: Client

    def upsert_entry(self, user_id: str, day: str, entry: dict[str, object]) -> None:
        """Insert or update a food entry keyed by its id."""
        nutrition = entry.get("nutrition")
        values = nutrition if isinstance(nutrition, dict) else {}
        self.client.table("food_entries").upsert(
            {
                "id": entry.get("id"),
                "user_id": user_id,
                "entry_date": day,
                "logged_at": entry.get("timestamp"),
                "name": entry.get("name"),
                "calories": values.get("calories", 0),
                "protein_g": values.get("protein_g", 0),
                "fat_g": values.get("fat_g", 0),
                "carbs_g": values.get("carbs_g", 0),
                "health_score": entry.get("health_score"),
                "confidence": entry.get("confidence"),
                "source": entry.get("source"),
            }
        ).execute()

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a food entry owned by the user."""
        self.client.table("food_entries").delete().eq("id", entry_id).eq(
            "user_id", user_id
        ).execute()

    def list_entries(self, user_id: str, day: str) -> list[dict[str, object]]:
        """Return the day's entries in the ledger's entry shape."""
        response = (
            self.client.table("food_entries")
            .select(
                "id, logged_at, name, calories, protein_g, fat_g, carbs_g, "
                "health_score, confidence, source"
            )
            .eq("user_id", user_id)
            .eq("entry_date", day)
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_entries_range(
        self, user_id: str, start: str, end: str
    ) -> list[dict[str, object]]:
        """Return entries dated ``start`` through ``end`` inclusive."""
        response = (
            self.client.table("food_entries")
            .select(
                "id, entry_date, logged_at, name, calories, protein_g, fat_g, "
                "carbs_g, health_score, confidence, source"
            )
            .eq("user_id", user_id)
            .gte("entry_date", start)
            .lte("entry_date", end)
            .order("entry_date", desc=False)
            .order("logged_at", desc=False)
            .execute()
        )
        return [
            {**_parse_row(row), "date": row.get("entry_date")}
            for row in response.data or []
        ]


def _parse_row(row: dict[str, object]) -> dict[str, object]:
    return {
        "id": str(row.get("id", "")),
        "timestamp": row.get("logged_at"),
        "name": row.get("name", ""),
        "nutrition": {
            "calories": row.get("calories", 0),
            "protein_g": row.get("protein_g", 0),
            "fat_g": row.get("fat_g", 0),
            "carbs_g": row.get("carbs_g", 0),
        },
        "health_score": row.get("health_score"),
        "confidence": row.get("confidence"),
        "source": row.get("source"),
    }
