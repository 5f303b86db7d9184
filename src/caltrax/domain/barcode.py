"""Domain models for barcode lookups."""

from dataclasses import dataclass

from caltrax.domain.ledger import EntrySource, FoodEntryInput
from caltrax.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class BarcodeProduct:
    """Packaged product resolved from a barcode."""

    barcode: str
    name: str
    brand: str | None
    nutrition: MacroProfile
    basis: str
    serving_size: str | None
    nutriscore_grade: str | None = None

    def to_entry_input(self) -> FoodEntryInput:
        """Build a barcode-sourced ledger entry input."""
        return FoodEntryInput(
            name=self.name,
            nutrition=self.nutrition,
            source=EntrySource.BARCODE,
        )
