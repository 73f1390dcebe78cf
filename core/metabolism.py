"""
core/metabolism.py
────────────────────────────────────────────────────────────────────────
Energy-expenditure maths used by the profile tools:

1. BMR  (Harris–Benedict, revised)
2. TDEE (activity multiplier)
3. Range validators guarding profile / tracking writes

Everything here is pure: no storage, no logging side effects.
"""

from __future__ import annotations

import math
from typing import Any, Literal

Gender = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]

# ──────────────────────────────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────────────────────────────
ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,      # little to no exercise
    "light": 1.375,        # 1-3 days/week
    "moderate": 1.55,      # 3-5 days/week
    "active": 1.725,       # 6-7 days/week
    "very_active": 1.9,    # physical job / twice a day
}

WEIGHT_MAX_KG = 1000
HEIGHT_RANGE_CM = (50, 300)
AGE_RANGE = (1, 150)
BODY_FAT_RANGE = (0, 100)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ──────────────────────────────────────────────────────────────────────
#  BMR / TDEE
# ──────────────────────────────────────────────────────────────────────
def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Gender) -> int:
    """Basal metabolic rate in kcal/day."""
    if gender == "male":
        base = 88.362 + 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age
    else:
        base = 447.593 + 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age
    return _round_half_up(base)


def calculate_tdee(bmr: float, activity_level: ActivityLevel) -> int:
    return _round_half_up(bmr * ACTIVITY_MULTIPLIERS[activity_level])


def calculate_profile_metrics(profile: Any, tracking: Any | None) -> dict[str, int]:
    """
    BMR + TDEE for `profile` (height/age/gender/activity_level) at the
    weight recorded in `tracking`.  Empty dict when no weight is known.
    """
    weight = getattr(tracking, "weight_kg", None) if tracking is not None else None
    if not weight:
        return {}

    bmr = calculate_bmr(weight, profile.height_cm, profile.age, profile.gender)
    return {
        "bmr_calories": bmr,
        "tdee_calories": calculate_tdee(bmr, profile.activity_level),
    }


# ──────────────────────────────────────────────────────────────────────
#  Validators
# ──────────────────────────────────────────────────────────────────────
def validate_weight(weight_kg: float) -> bool:
    return 0 < weight_kg <= WEIGHT_MAX_KG


def validate_height(height_cm: float) -> bool:
    lo, hi = HEIGHT_RANGE_CM
    return lo <= height_cm <= hi


def validate_age(age: int) -> bool:
    lo, hi = AGE_RANGE
    return lo <= age <= hi


def validate_body_fat_percentage(body_fat: float) -> bool:
    lo, hi = BODY_FAT_RANGE
    return lo <= body_fat <= hi
