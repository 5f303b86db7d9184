"""Domain models for user profiles and goal targets."""

from dataclasses import dataclass, field
from enum import StrEnum


class Gender(StrEnum):
    """Gender used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(StrEnum):
    """Self-reported daily activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    VERY = "very"
    EXTREME = "extreme"


class Goal(StrEnum):
    """Fitness goal tags."""

    BUILD_MUSCLE = "build_muscle"
    BURN_FAT = "burn_fat"
    LOSE_WEIGHT = "lose_weight"
    MAINTAIN = "maintain"
    GAIN_WEIGHT = "gain_weight"


@dataclass(frozen=True)
class MacroTargets:
    """Daily macronutrient targets in grams."""

    protein_g: int
    fat_g: int
    carbs_g: int


@dataclass(frozen=True)
class GoalTargets:
    """Daily calorie and macro targets."""

    calories: int
    macros: MacroTargets


@dataclass(frozen=True)
class Profile:
    """Biometric profile of a user.

    Inputs may be missing while onboarding is in progress; ``calories`` and
    ``macros`` are filled in once goals have been computed.
    """

    height_in: float | None = None
    weight_kg: float | None = None
    age_years: float | None = None
    gender: Gender | None = None
    activity_level: ActivityLevel | None = None
    goals: frozenset[Goal] = field(default_factory=frozenset)
    dietary_restrictions: frozenset[str] = field(default_factory=frozenset)
    calories: int | None = None
    macros: MacroTargets | None = None

    @property
    def targets(self) -> GoalTargets | None:
        """Return computed targets, if present."""
        if self.calories is None or self.macros is None:
            return None
        return GoalTargets(calories=self.calories, macros=self.macros)
