# foodieai/tdee.py
# ---------------------------------------------------------
# Daily calorie + macro targets (pure, no DB access).
#
# Steps:
# 1) age in whole years
# 2) BMR with Mifflin-St Jeor
# 3) TDEE = BMR * activity factor
# 4) calories = TDEE + delta (explicit or goal default)
# 5) protein / fat from body weight, carbs take the rest
# ---------------------------------------------------------

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

ACTIVITY_FACTORS = {
    "SEDENTARY": 1.2,
    "LIGHT": 1.375,
    "MODERATE": 1.55,
    "VERY_ACTIVE": 1.725,
}

DEFAULT_ACTIVITY_FACTOR = 1.2

# kcal adjustment when the profile has no explicit calorieDelta
GOAL_DELTAS = {
    "LOSE": -400,
    "GAIN": 250,
    "MAINTAIN": 0,
}

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_FAT = 9
KCAL_PER_G_CARBS = 4


@dataclass
class Targets:
    target_calories: int
    target_protein_g: int
    target_fat_g: int
    target_carbs_g: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def age_years(birth_date: date, today: Optional[date] = None) -> int:
    if today is None:
        today = datetime.now(timezone.utc).date()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return max(0, years)


def bmr_mifflin(sex: str, height_cm: float, weight_kg: float, age: int) -> float:
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + 5 if sex == "MALE" else base - 161


def activity_factor(level: Optional[str]) -> float:
    return ACTIVITY_FACTORS.get(level or "", DEFAULT_ACTIVITY_FACTOR)


def calculate_targets(
    sex: str,
    birth_date: date,
    height_cm: float,
    weight_kg: float,
    activity_level: str,
    goal: Optional[str] = "MAINTAIN",
    calorie_delta: Optional[int] = None,
    today: Optional[date] = None,
) -> Targets:
    """
    Example (female, 63 kg, 168 cm, 30 years, SEDENTARY, LOSE):
      BMR      = 630 + 1050 - 150 - 161 = 1369
      TDEE     = 1369 * 1.2 = 1642.8
      calories = round(1642.8 - 400) = 1243
      protein  = round(63 * 1.6) = 101
      fat      = round(63 * 0.8) = 50
      carbs    = round((1243 - 404 - 450) / 4) = 97
    """
    age = age_years(birth_date, today)
    tdee = bmr_mifflin(sex, height_cm, weight_kg, age) * activity_factor(activity_level)

    if calorie_delta is None:
        calorie_delta = GOAL_DELTAS.get(goal or "MAINTAIN", 0)

    calories = round_half_up(tdee + calorie_delta)

    protein = round_half_up(weight_kg * (1.8 if goal == "GAIN" else 1.6))
    fat = round_half_up(weight_kg * 0.8)
    carbs = max(
        0,
        round_half_up((calories - protein * KCAL_PER_G_PROTEIN - fat * KCAL_PER_G_FAT) / KCAL_PER_G_CARBS),
    )

    return Targets(
        target_calories=calories,
        target_protein_g=protein,
        target_fat_g=fat,
        target_carbs_g=carbs,
    )
