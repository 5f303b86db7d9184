"""Domain models for the food ledger."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum

from caltrax.domain.nutrition import MacroProfile, sum_macros


class EntrySource(StrEnum):
    """Where a food entry came from."""

    VISION = "vision"
    BARCODE = "barcode"
    MANUAL = "manual"


@dataclass(frozen=True)
class FoodEntryInput:
    """Data needed to log a food entry."""

    name: str
    nutrition: MacroProfile
    source: EntrySource = EntrySource.MANUAL
    health_score: float | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class FoodEntry:
    """A logged food entry. Entries are never mutated once created."""

    id: str
    timestamp: datetime
    name: str
    nutrition: MacroProfile
    source: EntrySource
    health_score: float | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class DayBucket:
    """Entries logged on one calendar day."""

    date: date
    entries: list[FoodEntry] = field(default_factory=list)

    @property
    def totals(self) -> MacroProfile:
        """Componentwise sum of the entries' nutrition."""
        return sum_macros([entry.nutrition for entry in self.entries])


@dataclass(frozen=True)
class WeekBucket:
    """Seven consecutive days starting on Monday."""

    start: date
    days: list[DayBucket]

    @property
    def weekly_totals(self) -> MacroProfile:
        """Sum of the seven daily totals."""
        return sum_macros([day.totals for day in self.days])
