# tests/test_metabolism.py
from __future__ import annotations

from types import SimpleNamespace

import pytest

from core.metabolism import (
    calculate_bmr,
    calculate_profile_metrics,
    calculate_tdee,
    validate_age,
    validate_body_fat_percentage,
    validate_height,
    validate_weight,
)

PROFILE = SimpleNamespace(height_cm=175, age=30, gender="male", activity_level="moderate")


# ── BMR / TDEE ───────────────────────────────────────────────────────
def test_bmr_harris_benedict_male():
    # 88.362 + 937.79 + 839.825 - 170.31 = 1695.667
    assert calculate_bmr(70, 175, 30, "male") == 1696


def test_bmr_harris_benedict_female():
    # 447.593 + 554.82 + 511.17 - 108.25 = 1405.333
    assert calculate_bmr(60, 165, 25, "female") == 1405


@pytest.mark.parametrize(
    "level, expected",
    [
        ("sedentary", 1800),
        ("light", 2063),      # 2062.5 rounds half up
        ("moderate", 2325),
        ("very_active", 2850),
    ],
)
def test_tdee_activity_multiplier(level, expected):
    assert calculate_tdee(1500, level) == expected


def test_tdee_unknown_level_raises():
    with pytest.raises(KeyError):
        calculate_tdee(1500, "couch")


# ── profile metrics ──────────────────────────────────────────────────
def test_metrics_empty_without_weight():
    tracking = SimpleNamespace(weight_kg=None, body_fat_percentage=20)
    assert calculate_profile_metrics(PROFILE, tracking) == {}
    assert calculate_profile_metrics(PROFILE, None) == {}


def test_metrics_with_weight():
    m = calculate_profile_metrics(PROFILE, SimpleNamespace(weight_kg=70))
    assert m == {"bmr_calories": 1696, "tdee_calories": calculate_tdee(1696, "moderate")}
    assert all(isinstance(v, int) for v in m.values())


# ── validators ───────────────────────────────────────────────────────
def test_weight_bounds():
    assert not validate_weight(0)
    assert validate_weight(0.1)
    assert validate_weight(1000)
    assert not validate_weight(1001)


def test_height_bounds():
    assert not validate_height(49)
    assert validate_height(50)
    assert validate_height(300)
    assert not validate_height(301)


def test_age_bounds():
    assert not validate_age(0)
    assert validate_age(1)
    assert validate_age(150)
    assert not validate_age(151)


def test_body_fat_bounds():
    assert not validate_body_fat_percentage(-1)
    assert validate_body_fat_percentage(0)
    assert validate_body_fat_percentage(100)
    assert not validate_body_fat_percentage(100.5)
