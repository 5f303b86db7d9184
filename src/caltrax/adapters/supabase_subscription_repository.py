"""Supabase repository for billing subscriptions."""

from dataclasses import dataclass

from supabase import Client

from caltrax.services.subscriptions import SubscriptionRepository


@dataclass
class SupabaseSubscriptionRepository(SubscriptionRepository):
    """Reads subscription rows written by the billing webhook."""

    client: Client

    def get_status(self, user_id: str) -> str | None:
        """Return the most recent subscription status for a user."""
        response = (
            self.client.table("subscriptions")
            .select("status")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        status = response.data[0].get("status")
        return str(status) if status else None
