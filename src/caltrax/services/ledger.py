"""Food ledger with per-day and per-week totals."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from caltrax.domain.ledger import (
    DayBucket,
    EntrySource,
    FoodEntry,
    FoodEntryInput,
    WeekBucket,
)
from caltrax.domain.nutrition import MacroProfile, coerce_macros
from caltrax.services.storage import KeyValueStore, day_key
from caltrax.services.sync import (
    DELETE_ENTRY,
    UPSERT_ENTRY,
    RemoteSync,
    SyncOperation,
)

DAYS_PER_WEEK = 7

_logger = logging.getLogger(__name__)


@dataclass
class MacroLedger:
    """Local-first ledger of food entries.

    Every mutation is a synchronous read-modify-write against the local
    store followed by a remote submission that never blocks or fails the
    caller.
    """

    store: KeyValueStore
    remote_sync: RemoteSync

    def add_entry(
        self, user_id: str, day: date, entry_input: FoodEntryInput
    ) -> FoodEntry:
        """Append an entry to the day's bucket and return it."""
        entry = FoodEntry(
            id=str(uuid4()),
            timestamp=datetime.now(tz=UTC),
            name=entry_input.name.strip() or "Unknown food",
            nutrition=coerce_macros(entry_input.nutrition.to_dict()),
            source=EntrySource(entry_input.source),
            health_score=entry_input.health_score,
            confidence=entry_input.confidence,
        )
        bucket = self.get_day(user_id, day)
        self._save_day(user_id, DayBucket(date=day, entries=[*bucket.entries, entry]))
        self.remote_sync.submit(
            SyncOperation(
                kind=UPSERT_ENTRY,
                user_id=user_id,
                payload={"date": day.isoformat(), "entry": entry_to_dict(entry)},
            )
        )
        return entry

    def get_day(self, user_id: str, day: date) -> DayBucket:
        """Return the day's bucket, empty when nothing was logged."""
        raw = self.store.get(day_key(user_id, day.isoformat()))
        if not isinstance(raw, dict):
            return DayBucket(date=day)
        entries = raw.get("entries")
        return DayBucket(
            date=day,
            entries=[
                entry_from_dict(item)
                for item in (entries if isinstance(entries, list) else [])
                if isinstance(item, dict)
            ],
        )

    def get_week(self, user_id: str, any_day: date) -> WeekBucket:
        """Return the Monday-to-Sunday week containing ``any_day``."""
        start = week_start(any_day)
        return WeekBucket(
            start=start,
            days=[
                self.get_day(user_id, start + timedelta(days=offset))
                for offset in range(DAYS_PER_WEEK)
            ],
        )

    def delete_entry(self, user_id: str, day: date, entry_id: str) -> bool:
        """Remove an entry; return False when there was nothing to remove."""
        bucket = self.get_day(user_id, day)
        remaining = [entry for entry in bucket.entries if entry.id != entry_id]
        if len(remaining) == len(bucket.entries):
            return False
        self._save_day(user_id, DayBucket(date=day, entries=remaining))
        self.remote_sync.submit(
            SyncOperation(
                kind=DELETE_ENTRY,
                user_id=user_id,
                payload={"date": day.isoformat(), "entry_id": entry_id},
            )
        )
        return True

    async def pull_day(self, user_id: str, day: date) -> DayBucket:
        """Return the day's bucket, filling the local store from remote if absent."""
        if self.store.get(day_key(user_id, day.isoformat())) is not None:
            return self.get_day(user_id, day)
        try:
            rows = await asyncio.wait_for(
                asyncio.to_thread(
                    self.remote_sync.entry_repository.list_entries,
                    user_id,
                    day.isoformat(),
                ),
                timeout=self.remote_sync.timeout_seconds,
            )
        except Exception:
            _logger.warning(
                "Failed to load remote entries for user %s on %s",
                user_id,
                day.isoformat(),
                exc_info=True,
            )
            return DayBucket(date=day)
        # Entries logged locally while the read was in flight win.
        if self.store.get(day_key(user_id, day.isoformat())) is not None:
            return self.get_day(user_id, day)
        bucket = DayBucket(date=day, entries=[entry_from_dict(row) for row in rows])
        if bucket.entries:
            self._save_day(user_id, bucket)
        return bucket

    async def pull_week(self, user_id: str, any_day: date) -> WeekBucket:
        """Return the week, filling days absent locally with one remote read."""
        start = week_start(any_day)
        days = [start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]
        missing = [day for day in days if not self._has_day(user_id, day)]
        if not missing:
            return self.get_week(user_id, any_day)
        try:
            rows = await asyncio.wait_for(
                asyncio.to_thread(
                    self.remote_sync.entry_repository.list_entries_range,
                    user_id,
                    missing[0].isoformat(),
                    missing[-1].isoformat(),
                ),
                timeout=self.remote_sync.timeout_seconds,
            )
        except Exception:
            _logger.warning(
                "Failed to load remote entries for user %s in week of %s",
                user_id,
                start.isoformat(),
                exc_info=True,
            )
            return self.get_week(user_id, any_day)
        by_day: dict[str, list[FoodEntry]] = {}
        for row in rows:
            by_day.setdefault(str(row.get("date")), []).append(entry_from_dict(row))
        for day in missing:
            entries = by_day.get(day.isoformat())
            # Days written locally while the read was in flight win.
            if entries and not self._has_day(user_id, day):
                self._save_day(user_id, DayBucket(date=day, entries=entries))
        return self.get_week(user_id, any_day)

    def _has_day(self, user_id: str, day: date) -> bool:
        return self.store.get(day_key(user_id, day.isoformat())) is not None

    def _save_day(self, user_id: str, bucket: DayBucket) -> None:
        self.store.set(day_key(user_id, bucket.date.isoformat()), day_to_dict(bucket))


def week_start(day: date) -> date:
    """Return the Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def weekly_totals(week: WeekBucket) -> MacroProfile:
    """Componentwise sum of the week's daily totals."""
    return week.weekly_totals


def entry_to_dict(entry: FoodEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "name": entry.name,
        "nutrition": entry.nutrition.to_dict(),
        "health_score": entry.health_score,
        "confidence": entry.confidence,
        "source": entry.source.value,
    }


def entry_from_dict(raw: dict[str, object]) -> FoodEntry:
    timestamp_raw = raw.get("timestamp")
    timestamp = (
        datetime.fromisoformat(timestamp_raw)
        if isinstance(timestamp_raw, str) and timestamp_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    source_raw = raw.get("source")
    source = (
        EntrySource(source_raw)
        if source_raw in {member.value for member in EntrySource}
        else EntrySource.MANUAL
    )
    return FoodEntry(
        id=str(raw.get("id", "")),
        timestamp=timestamp,
        name=str(raw.get("name", "")),
        nutrition=coerce_macros(raw.get("nutrition")),
        source=source,
        health_score=_optional_float(raw.get("health_score")),
        confidence=_optional_float(raw.get("confidence")),
    )


def day_to_dict(bucket: DayBucket) -> dict[str, object]:
    return {
        "date": bucket.date.isoformat(),
        "entries": [entry_to_dict(entry) for entry in bucket.entries],
        "totals": bucket.totals.to_dict(),
    }


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    return None
