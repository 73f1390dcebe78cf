from __future__ import annotations
from datetime import date as Date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.metabolism import (
    AGE_RANGE,
    BODY_FAT_RANGE,
    HEIGHT_RANGE_CM,
    WEIGHT_MAX_KG,
    ActivityLevel,
    Gender,
)
from .common import DateStr, Limit, Offset, UtcDatetime

PROFILE_FIELDS = ("height_cm", "age", "gender", "activity_level")
TRACKING_FIELDS = ("weight_kg", "muscle_mass_kg", "body_fat_percentage")


class GetProfileParams(BaseModel):
    model_config = ConfigDict(extra="forbid")


class UpdateProfileParams(BaseModel):
    # profile
    height_cm: float | None = Field(
        None, ge=HEIGHT_RANGE_CM[0], le=HEIGHT_RANGE_CM[1], description="Height in centimeters"
    )
    age: int | None = Field(None, ge=AGE_RANGE[0], le=AGE_RANGE[1], description="Age in years")
    gender: Gender | None = None
    activity_level: ActivityLevel | None = Field(
        None, description="Activity level for TDEE calculation"
    )
    # tracking
    weight_kg: float | None = Field(
        None, gt=0, le=WEIGHT_MAX_KG, description="Current weight in kilograms"
    )
    muscle_mass_kg: float | None = Field(
        None, ge=0, le=WEIGHT_MAX_KG, description="Muscle mass in kilograms"
    )
    body_fat_percentage: float | None = Field(
        None, ge=BODY_FAT_RANGE[0], le=BODY_FAT_RANGE[1], description="Body fat percentage (0-100)"
    )

    model_config = ConfigDict(extra="forbid")

    def profile_changes(self) -> dict:
        return self.model_dump(include=set(PROFILE_FIELDS), exclude_none=True)

    def tracking_changes(self) -> dict:
        return self.model_dump(include=set(TRACKING_FIELDS), exclude_none=True)


class ProfileHistoryParams(BaseModel):
    date: DateStr | None = Field(None, description="Specific day to return")
    start_date: DateStr | None = Field(None, description="Start of the date range (inclusive)")
    end_date: DateStr | None = Field(None, description="End of the date range (inclusive)")
    limit: Limit = 10
    offset: Offset = 0

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_dates(self) -> "ProfileHistoryParams":
        if self.date and (self.start_date or self.end_date):
            raise ValueError(
                "Cannot use date parameter with start_date or end_date. Use either "
                "date for specific day or start_date/end_date for range."
            )
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date cannot be later than end_date")
        return self


# ───────────────────────── output shapes ──────────────────────────
class ProfileOut(BaseModel):
    user_id: str
    height_cm: float
    age: int
    gender: str
    activity_level: str
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class TrackingOut(BaseModel):
    id: str
    user_id: str
    weight_kg: float | None = None
    muscle_mass_kg: float | None = None
    body_fat_percentage: float | None = None
    bmr_calories: int | None = None
    tdee_calories: int | None = None
    recorded_date: Date
    created_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)
