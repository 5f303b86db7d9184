"""Best-effort mirroring of local writes to the remote store."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from caltrax.errors import RemoteSyncFailedError, StorageUnavailableError
from caltrax.services.storage import PENDING_SYNC_KEY, KeyValueStore

_logger = logging.getLogger(__name__)

UPSERT_ENTRY = "upsert_entry"
DELETE_ENTRY = "delete_entry"
UPSERT_PROFILE = "upsert_profile"


class FoodEntryRemoteRepository(Protocol):
    """Remote persistence interface for food entries."""

    def upsert_entry(self, user_id: str, day: str, entry: dict[str, object]) -> None:
        """Insert or update a food entry row."""

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete a food entry row."""

    def list_entries(self, user_id: str, day: str) -> list[dict[str, object]]:
        """Return the stored entries of a day in insertion order."""

    def list_entries_range(
        self, user_id: str, start: str, end: str
    ) -> list[dict[str, object]]:
        """Return entries dated ``start`` through ``end``, each with its ``date``."""


class ProfileRemoteRepository(Protocol):
    """Remote persistence interface for profiles."""

    def upsert_profile(self, user_id: str, profile: dict[str, object]) -> None:
        """Insert or update a user's profile row."""

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        """Return the stored profile row, if any."""


@dataclass(frozen=True)
class SyncOperation:
    """A remote write waiting to be applied."""

    kind: str
    user_id: str
    payload: dict[str, object]

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "user_id": self.user_id, "payload": self.payload}

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> "SyncOperation":
        payload = raw.get("payload")
        return cls(
            kind=str(raw.get("kind", "")),
            user_id=str(raw.get("user_id", "")),
            payload=payload if isinstance(payload, dict) else {},
        )


@dataclass
class RemoteSync:
    """Queue of remote writes applied in the background.

    Pending operations are kept in the local store so that work left over
    from a previous run is retried on the next flush. Failures are logged and
    retained; they never reach the caller that submitted the operation.
    """

    store: KeyValueStore
    entry_repository: FoodEntryRemoteRepository
    profile_repository: ProfileRemoteRepository
    timeout_seconds: float = 5.0
    max_pending: int = 500
    _drain_task: "asyncio.Task[int] | None" = field(default=None, init=False)

    def submit(self, operation: SyncOperation) -> None:
        """Queue an operation and start draining if an event loop is running."""
        pending = self._load_pending()
        pending.append(operation)
        if len(pending) > self.max_pending:
            dropped = pending[: len(pending) - self.max_pending]
            pending = pending[len(dropped) :]
            _logger.warning(
                "Remote sync queue full, dropped %s operations", len(dropped)
            )
        self._save_pending(pending)
        self._schedule_drain()

    def pending(self) -> list[SyncOperation]:
        """Return operations still waiting to be applied."""
        return self._load_pending()

    async def flush(self) -> int:
        """Apply pending operations in order and return how many remain.

        Draining stops at the first failure so that operations on the same
        record are never applied out of order.
        """
        while True:
            pending = self._load_pending()
            if not pending:
                return 0
            operation = pending[0]
            try:
                await self._apply(operation)
            except RemoteSyncFailedError as exc:
                _logger.warning(
                    "Remote sync %s for user %s failed: %s",
                    operation.kind,
                    operation.user_id,
                    exc,
                )
                return len(pending)
            # Re-read: submissions may have arrived while the write was in flight.
            remaining = self._load_pending()
            if remaining and remaining[0] == operation:
                remaining.pop(0)
            self._save_pending(remaining)

    async def wait_idle(self) -> None:
        """Wait for the drain task running on the current loop, if any."""
        if self._active_drain(asyncio.get_running_loop()):
            await self._drain_task

    def _schedule_drain(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._active_drain(loop):
            return
        self._drain_task = loop.create_task(self.flush())

    def _active_drain(self, loop: asyncio.AbstractEventLoop) -> bool:
        task = self._drain_task
        return task is not None and not task.done() and task.get_loop() is loop

    async def _apply(self, operation: SyncOperation) -> None:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._apply_sync, operation),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise RemoteSyncFailedError(
                f"timed out after {self.timeout_seconds}s"
            ) from exc
        except Exception as exc:
            raise RemoteSyncFailedError(str(exc)) from exc

    def _apply_sync(self, operation: SyncOperation) -> None:
        payload = operation.payload
        if operation.kind == UPSERT_ENTRY:
            entry = payload.get("entry")
            self.entry_repository.upsert_entry(
                operation.user_id,
                str(payload.get("date", "")),
                entry if isinstance(entry, dict) else {},
            )
        elif operation.kind == DELETE_ENTRY:
            self.entry_repository.delete_entry(
                operation.user_id, str(payload.get("entry_id", ""))
            )
        elif operation.kind == UPSERT_PROFILE:
            self.profile_repository.upsert_profile(operation.user_id, payload)
        else:
            _logger.warning("Skipping unknown sync operation %s", operation.kind)

    def _load_pending(self) -> list[SyncOperation]:
        raw = self.store.get(PENDING_SYNC_KEY)
        if not isinstance(raw, list):
            return []
        return [
            SyncOperation.from_dict(item) for item in raw if isinstance(item, dict)
        ]

    def _save_pending(self, pending: list[SyncOperation]) -> None:
        try:
            if pending:
                self.store.set(PENDING_SYNC_KEY, [op.to_dict() for op in pending])
            else:
                self.store.remove(PENDING_SYNC_KEY)
        except StorageUnavailableError:
            _logger.exception("Failed to persist the remote sync queue")
