"""Daily calorie and macro goal computation."""

import math
from dataclasses import dataclass

from caltrax.domain.nutrition import MacroProfile
from caltrax.domain.profile import (
    ActivityLevel,
    Gender,
    Goal,
    GoalTargets,
    MacroTargets,
    Profile,
)
from caltrax.errors import MissingFieldError

CM_PER_INCH = 2.54

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.20,
    ActivityLevel.LIGHT: 1.35,
    ActivityLevel.MODERATE: 1.50,
    ActivityLevel.VERY: 1.65,
    ActivityLevel.EXTREME: 1.80,
}

LOSS_GOALS = frozenset({Goal.LOSE_WEIGHT, Goal.BURN_FAT})
GAIN_GOALS = frozenset({Goal.BUILD_MUSCLE, Goal.GAIN_WEIGHT})

CALORIE_RANGE = (1200, 4000)
PROTEIN_RANGE = (50, 300)
FAT_RANGE = (30, 150)
CARB_RANGE = (50, 500)

DEFICIT_KCAL = 400
DEFICIT_BMR_FLOOR = 1.10
SURPLUS_KCAL = 300
SURPLUS_TDEE_CAP = 1.15

NEAR_GOAL_PERCENT = 80.0

_REQUIRED_FIELDS = ("height_in", "weight_kg", "age_years", "gender", "activity_level")


def compute_goals(profile: Profile) -> GoalTargets:
    """Compute daily calorie and macro targets for a profile.

    Raises MissingFieldError naming the first absent biometric input.
    Loss goals take precedence over gain goals for the calorie adjustment.
    """
    for name in _REQUIRED_FIELDS:
        if getattr(profile, name) is None:
            raise MissingFieldError(name)

    weight_kg = float(profile.weight_kg)
    bmr = basal_metabolic_rate(
        weight_kg=weight_kg,
        height_cm=float(profile.height_in) * CM_PER_INCH,
        age_years=float(profile.age_years),
        gender=Gender(profile.gender),
    )
    tdee = bmr * ACTIVITY_MULTIPLIERS[ActivityLevel(profile.activity_level)]
    goals = frozenset(profile.goals)
    wants_loss = bool(goals & LOSS_GOALS)
    wants_gain = bool(goals & GAIN_GOALS)

    if wants_loss:
        calorie_goal = max(tdee - DEFICIT_KCAL, bmr * DEFICIT_BMR_FLOOR)
    elif wants_gain:
        calorie_goal = min(tdee + SURPLUS_KCAL, tdee * SURPLUS_TDEE_CAP)
    else:
        calorie_goal = tdee
    calories = round_half_up(_clamp(calorie_goal, *CALORIE_RANGE))

    if wants_gain:
        protein_per_kg = 2.0
    elif wants_loss:
        protein_per_kg = 1.8
    else:
        protein_per_kg = 1.6
    protein_g = _clamp(round_half_up(weight_kg * protein_per_kg), *PROTEIN_RANGE)

    fat_share = 0.25 if wants_loss else 0.30
    fat_g = _clamp(round_half_up(calories * fat_share / 9), *FAT_RANGE)

    carb_kcal = calories - protein_g * 4 - fat_g * 9
    carbs_g = _clamp(round_half_up(carb_kcal / 4), *CARB_RANGE)

    return GoalTargets(
        calories=calories,
        macros=MacroTargets(protein_g=protein_g, fat_g=fat_g, carbs_g=carbs_g),
    )


def basal_metabolic_rate(
    *, weight_kg: float, height_cm: float, age_years: float, gender: Gender
) -> float:
    """Mifflin-St Jeor BMR in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    if gender == Gender.MALE:
        return base + 5
    return base - 161


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def _clamp(value: float, low: int, high: int) -> float:
    return min(max(value, low), high)


@dataclass(frozen=True)
class Progress:
    """Progress of a tracked quantity towards its goal."""

    value: float
    goal: float
    percent: float
    band: str


def progress_percent(value: float, goal: float) -> float:
    """Return ``min(100, 100 * value / goal)``, or 0 for a non-positive goal."""
    if goal <= 0:
        return 0.0
    return min(100.0, 100.0 * value / goal)


def progress_band(value: float, goal: float) -> str:
    """Classify progress as ``on_track``, ``near`` or ``under``."""
    percent = progress_percent(value, goal)
    if percent >= 100.0:
        return "on_track"
    if percent >= NEAR_GOAL_PERCENT:
        return "near"
    return "under"


def goal_progress(totals: MacroProfile, targets: GoalTargets) -> dict[str, Progress]:
    """Return progress for calories and each macro."""
    pairs = {
        "calories": (totals.calories, targets.calories),
        "protein_g": (totals.protein_g, targets.macros.protein_g),
        "fat_g": (totals.fat_g, targets.macros.fat_g),
        "carbs_g": (totals.carbs_g, targets.macros.carbs_g),
    }
    return {
        name: Progress(
            value=value,
            goal=goal,
            percent=progress_percent(value, goal),
            band=progress_band(value, goal),
        )
        for name, (value, goal) in pairs.items()
    }
