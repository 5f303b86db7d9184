"""User profile and goal persistence."""

import asyncio
import logging
from dataclasses import dataclass, replace

from caltrax.domain.profile import (
    ActivityLevel,
    Gender,
    Goal,
    GoalTargets,
    MacroTargets,
    Profile,
)
from caltrax.services.goals import compute_goals
from caltrax.services.storage import KeyValueStore, profile_key
from caltrax.services.sync import UPSERT_PROFILE, RemoteSync, SyncOperation

_logger = logging.getLogger(__name__)

_GOAL_VALUES = frozenset(goal.value for goal in Goal)


@dataclass
class ProfileService:
    """Stores profiles locally with computed goals and mirrors them remotely."""

    store: KeyValueStore
    remote_sync: RemoteSync

    def save_profile(self, user_id: str, profile: Profile) -> Profile:
        """Recompute goals for the profile, persist it and return it."""
        targets = compute_goals(profile)
        completed = replace(profile, calories=targets.calories, macros=targets.macros)
        payload = profile_to_dict(completed)
        self.store.set(profile_key(user_id), payload)
        self.remote_sync.submit(
            SyncOperation(kind=UPSERT_PROFILE, user_id=user_id, payload=payload)
        )
        return completed

    def get_profile(self, user_id: str) -> Profile | None:
        """Return the locally stored profile, if any."""
        raw = self.store.get(profile_key(user_id))
        if not isinstance(raw, dict):
            return None
        return profile_from_dict(raw)

    async def pull_profile(self, user_id: str) -> Profile | None:
        """Return the local profile, restoring it from remote when absent."""
        local = self.get_profile(user_id)
        if local is not None:
            return local
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(
                    self.remote_sync.profile_repository.get_profile, user_id
                ),
                timeout=self.remote_sync.timeout_seconds,
            )
        except Exception:
            _logger.warning(
                "Failed to load remote profile for user %s", user_id, exc_info=True
            )
            return None
        if not isinstance(raw, dict):
            return None
        try:
            profile = profile_from_dict(raw)
        except (TypeError, ValueError):
            _logger.warning(
                "Ignoring malformed remote profile for user %s", user_id, exc_info=True
            )
            return None
        self.store.set(profile_key(user_id), profile_to_dict(profile))
        return profile

    def goal_targets(self, user_id: str) -> GoalTargets | None:
        """Return the stored goal targets, if goals were computed."""
        profile = self.get_profile(user_id)
        return profile.targets if profile else None


def profile_to_dict(profile: Profile) -> dict[str, object]:
    return {
        "height_in": profile.height_in,
        "weight_kg": profile.weight_kg,
        "age_years": profile.age_years,
        "gender": profile.gender.value if profile.gender else None,
        "activity_level": (
            profile.activity_level.value if profile.activity_level else None
        ),
        "goals": sorted(goal.value for goal in profile.goals),
        "dietary_restrictions": sorted(profile.dietary_restrictions),
        "calories": profile.calories,
        "macros": (
            {
                "protein_g": profile.macros.protein_g,
                "fat_g": profile.macros.fat_g,
                "carbs_g": profile.macros.carbs_g,
            }
            if profile.macros
            else None
        ),
    }


def profile_from_dict(raw: dict[str, object]) -> Profile:
    macros_raw = raw.get("macros")
    macros = (
        MacroTargets(
            protein_g=int(macros_raw.get("protein_g", 0)),
            fat_g=int(macros_raw.get("fat_g", 0)),
            carbs_g=int(macros_raw.get("carbs_g", 0)),
        )
        if isinstance(macros_raw, dict)
        else None
    )
    gender = raw.get("gender")
    activity_level = raw.get("activity_level")
    calories = raw.get("calories")
    return Profile(
        height_in=_optional_number(raw.get("height_in")),
        weight_kg=_optional_number(raw.get("weight_kg")),
        age_years=_optional_number(raw.get("age_years")),
        gender=Gender(gender) if gender else None,
        activity_level=ActivityLevel(activity_level) if activity_level else None,
        goals=frozenset(
            Goal(goal) for goal in raw.get("goals") or [] if goal in _GOAL_VALUES
        ),
        dietary_restrictions=frozenset(
            str(tag) for tag in raw.get("dietary_restrictions") or []
        ),
        calories=int(calories) if calories is not None else None,
        macros=macros,
    )


def _optional_number(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
