"""Subscription status checks."""

from dataclasses import dataclass
from typing import Protocol

PAID_STATUSES = frozenset({"active", "trialing"})


class SubscriptionRepository(Protocol):
    """Persistence interface for billing subscription status."""

    def get_status(self, user_id: str) -> str | None:
        """Return the user's subscription status, if a subscription exists."""


@dataclass
class SubscriptionService:
    """Answers whether a user has a paid subscription."""

    repository: SubscriptionRepository

    def has_paid(self, user_id: str) -> bool:
        """Return True for active or trialing subscriptions."""
        status = self.repository.get_status(user_id)
        return status is not None and status.lower() in PAID_STATUSES
