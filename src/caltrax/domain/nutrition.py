"""Nutrition domain models."""

import math
from dataclasses import dataclass

NUTRIENT_FIELDS = ("calories", "protein_g", "fat_g", "carbs_g")


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrients for a food or a total."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0

    def __add__(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            fat_g=self.fat_g + other.fat_g,
            carbs_g=self.carbs_g + other.carbs_g,
        )

    def to_dict(self) -> dict[str, float]:
        """Return the JSON shape used by storage and the API."""
        return {
            "calories": self.calories,
            "protein_g": self.protein_g,
            "fat_g": self.fat_g,
            "carbs_g": self.carbs_g,
        }


def sum_macros(profiles: list[MacroProfile]) -> MacroProfile:
    """Return the componentwise sum of macro profiles."""
    total = MacroProfile()
    for profile in profiles:
        total = total + profile
    return total


def coerce_macros(raw: object) -> MacroProfile:
    """Coerce an untrusted nutrition payload into a MacroProfile.

    Missing, non-numeric and negative values become 0.
    """
    values = raw if isinstance(raw, dict) else {}
    return MacroProfile(
        **{name: coerce_amount(values.get(name)) for name in NUTRIENT_FIELDS}
    )


def coerce_amount(value: object) -> float:
    """Return a non-negative float for a nutrient amount, or 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return max(amount, 0.0)
