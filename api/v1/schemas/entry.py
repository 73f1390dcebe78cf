from __future__ import annotations
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import DateStr, Limit, Offset, UtcDatetime

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class ListEntriesParams(BaseModel):
    date: DateStr | None = Field(None, description="Defaults to today (UTC)")
    limit: Limit = 10
    offset: Offset = 0

    model_config = ConfigDict(extra="forbid")


class AddEntryParams(BaseModel):
    food_name: str = Field(..., min_length=1, description="Name of the food item")
    calories: int = Field(..., ge=0, description="Number of calories")
    protein_g: float | None = Field(None, ge=0, description="Protein in grams")
    carbs_g: float | None = Field(None, ge=0, description="Carbohydrates in grams")
    fat_g: float | None = Field(None, ge=0, description="Fat in grams")
    meal_type: MealType | None = None
    entry_date: DateStr | None = Field(None, description="Defaults to today (UTC)")

    model_config = ConfigDict(extra="forbid")


class UpdateEntryParams(BaseModel):
    entry_id: str = Field(..., min_length=1, description="ID of the food entry to update")
    food_name: str | None = Field(None, min_length=1)
    calories: int | None = Field(None, ge=0)
    protein_g: float | None = Field(None, ge=0)
    carbs_g: float | None = Field(None, ge=0)
    fat_g: float | None = Field(None, ge=0)
    meal_type: MealType | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _has_changes(self) -> "UpdateEntryParams":
        if not self.changes():
            raise ValueError(
                "At least one field to update must be provided "
                "(food_name, calories, protein_g, carbs_g, fat_g, or meal_type)"
            )
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude={"entry_id"}, exclude_none=True)


class DeleteEntryParams(BaseModel):
    entry_id: str = Field(..., min_length=1, description="ID of the food entry to delete")

    model_config = ConfigDict(extra="forbid")


class EntryOut(BaseModel):
    id: str
    food_name: str
    calories: int
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    meal_type: str | None = None
    entry_date: date
    created_at: UtcDatetime
    updated_at: UtcDatetime | None = None

    model_config = ConfigDict(from_attributes=True)
