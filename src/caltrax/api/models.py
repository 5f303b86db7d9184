"""Request models for the HTTP API."""

from datetime import date

from pydantic import BaseModel, Field

from caltrax.domain.ledger import EntrySource, FoodEntryInput
from caltrax.domain.nutrition import coerce_macros
from caltrax.domain.profile import ActivityLevel, Gender, Goal, Profile


class ProfileRequest(BaseModel):
    """Biometric inputs for goal computation."""

    height_in: float | None = Field(default=None, gt=0)
    weight_kg: float | None = Field(default=None, gt=0)
    age_years: float | None = Field(default=None, gt=0)
    gender: Gender | None = None
    activity_level: ActivityLevel | None = None
    goals: list[Goal] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)

    def to_profile(self) -> Profile:
        return Profile(
            height_in=self.height_in,
            weight_kg=self.weight_kg,
            age_years=self.age_years,
            gender=self.gender,
            activity_level=self.activity_level,
            goals=frozenset(self.goals),
            dietary_restrictions=frozenset(self.dietary_restrictions),
        )


class FoodEntryRequest(BaseModel):
    """Manually entered or client-resolved food entry."""

    name: str = Field(min_length=1)
    nutrition: dict[str, object] = Field(default_factory=dict)
    source: EntrySource = EntrySource.MANUAL
    health_score: float | None = Field(default=None, ge=1, le=10)
    confidence: float | None = Field(default=None, ge=0, le=1)

    def to_entry_input(self) -> FoodEntryInput:
        return FoodEntryInput(
            name=self.name,
            nutrition=coerce_macros(self.nutrition),
            source=self.source,
            health_score=self.health_score,
            confidence=self.confidence,
        )


class AnalyzeRequest(BaseModel):
    """Food photo to analyze, as base64 or a data URL."""

    image: str = Field(min_length=1)
    day: date | None = None
    log: bool = True
