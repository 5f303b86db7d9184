"""Local key-value storage port."""

import copy
from dataclasses import dataclass
from typing import Protocol


class KeyValueStore(Protocol):
    """Local store for JSON-compatible values."""

    def get(self, key: str) -> object | None:
        """Return the stored value or None."""

    def set(self, key: str, value: object) -> None:
        """Store a value, replacing any previous one."""

    def remove(self, key: str) -> None:
        """Remove a value if present."""


@dataclass
class InMemoryStore(KeyValueStore):
    """Process-local store used in tests and ephemeral deployments."""

    _values: dict[str, object]

    def __init__(self) -> None:
        self._values = {}

    def get(self, key: str) -> object | None:
        """Return a copy of the stored value."""
        return copy.deepcopy(self._values.get(key))

    def set(self, key: str, value: object) -> None:
        """Store a copy of the value."""
        self._values[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        """Drop the key."""
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        """Return stored keys."""
        return list(self._values)


def day_key(user_id: str, day: str) -> str:
    """Key for a user's day bucket."""
    return f"caltrax:{user_id}:day:{day}"


def profile_key(user_id: str) -> str:
    """Key for a user's profile."""
    return f"caltrax:{user_id}:profile"


PENDING_SYNC_KEY = "caltrax:sync:pending"
