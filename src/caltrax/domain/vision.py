"""Models for food image analysis results."""

from pydantic import BaseModel, Field, field_validator

from caltrax.domain.ledger import EntrySource, FoodEntryInput
from caltrax.domain.nutrition import MacroProfile, coerce_amount


class NutritionFacts(BaseModel):
    """Nutrition values reported by the recognition model."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0

    @field_validator("calories", "protein_g", "fat_g", "carbs_g", mode="before")
    @classmethod
    def _coerce(cls, value: object) -> float:
        return coerce_amount(value)

    def to_macros(self) -> MacroProfile:
        """Convert to the ledger's macro profile."""
        return MacroProfile(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )


class FoodAnalysis(BaseModel):
    """Structured output for food image analysis."""

    name: str = "Unknown food"
    nutrition: NutritionFacts = Field(default_factory=NutritionFacts)
    health_score: float | None = None
    confidence: float | None = None
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return "Unknown food"

    @field_validator("nutrition", mode="before")
    @classmethod
    def _default_nutrition(cls, value: object) -> object:
        return value if isinstance(value, dict) else {}

    @field_validator("health_score", mode="before")
    @classmethod
    def _clamp_health_score(cls, value: object) -> float | None:
        return _clamp_optional(value, 1.0, 10.0)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> float | None:
        return _clamp_optional(value, 0.0, 1.0)

    @field_validator("pros", "cons", mode="before")
    @classmethod
    def _string_list(cls, value: object) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if item is not None]

    def to_entry_input(self) -> FoodEntryInput:
        """Build a vision-sourced ledger entry input."""
        return FoodEntryInput(
            name=self.name,
            nutrition=self.nutrition.to_macros(),
            source=EntrySource.VISION,
            health_score=self.health_score,
            confidence=self.confidence,
        )


def _clamp_optional(value: object, low: float, high: float) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:
        return None
    return min(max(number, low), high)
