# api/v1/profile.py
"""
Profile + body-tracking tools.

A profile holds the slow-moving attributes (height, age, gender, activity
level); tracking rows hold dated measurements.  BMR/TDEE live on the
tracking row and are recomputed whenever a weight is known.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError

from api.v1.base import ToolContext, ToolResult, error, json_result, success
from api.v1.schemas import (
    GetProfileParams,
    ProfileHistoryParams,
    ProfileOut,
    TrackingOut,
    UpdateProfileParams,
)
from core.metabolism import (
    calculate_profile_metrics,
    validate_age,
    validate_body_fat_percentage,
    validate_height,
    validate_weight,
)
from services.db import ProfileTracking, UserProfile
from services.repositories import ProfileTrackingRepository, UserProfileRepository

_LOG = logging.getLogger(__name__)

NO_PROFILE = (
    "No profile found. Please create a profile first by updating your profile information."
)
CREATE_REQUIRES = (
    "Profile not found. Please provide height_cm, age, and gender to create a new profile."
)
CREATE_FIELDS = ("height_cm", "age", "gender")

_RANGE_CHECKS = (
    ("weight_kg", validate_weight, "Invalid weight. Must be greater than 0 and at most 1000 kg."),
    ("height_cm", validate_height, "Invalid height. Must be between 50 and 300 cm."),
    ("age", validate_age, "Invalid age. Must be between 1 and 150 years."),
    (
        "body_fat_percentage",
        validate_body_fat_percentage,
        "Invalid body fat percentage. Must be between 0 and 100.",
    ),
)

# (statistics key, tracking column)
_STAT_SERIES = (
    ("weight", "weight_kg"),
    ("body_fat", "body_fat_percentage"),
    ("muscle_mass", "muscle_mass_kg"),
)


# ───────────────────────── helpers ──────────────────────────
def _view(profile: UserProfile, latest: ProfileTracking | None) -> dict[str, Any]:
    return {
        "profile": ProfileOut.model_validate(profile).model_dump(mode="json"),
        "latest_tracking": (
            TrackingOut.model_validate(latest).model_dump(mode="json") if latest else None
        ),
        "calculated_metrics": calculate_profile_metrics(profile, latest),
    }


def _range_problem(params: UpdateProfileParams) -> str | None:
    for field, check, message in _RANGE_CHECKS:
        value = getattr(params, field)
        if value is not None and not check(value):
            return message
    return None


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def summarize(rows: Sequence[Any]) -> dict[str, dict[str, float]] | None:
    """
    current/min/max/average/entries_count per measurement series.

    `rows` must be newest first; "current" is the first non-null value.
    Series without any value are left out.  None for an empty result.
    """
    if not rows:
        return None

    stats: dict[str, dict[str, float]] = {}
    for name, column in _STAT_SERIES:
        values = [getattr(r, column) for r in rows if getattr(r, column) is not None]
        if not values:
            continue
        stats[name] = {
            "current": values[0],
            "min": min(values),
            "max": max(values),
            "average": _round2(sum(values) / len(values)),
            "entries_count": len(values),
        }
    return stats


# ───────────────────────── read ─────────────────────────────
async def get_profile(params: GetProfileParams, ctx: ToolContext) -> ToolResult:
    try:
        async with ctx.database.session() as db:
            found = await UserProfileRepository(db).get_with_latest_tracking(ctx.user_id)
            if found is None:
                return success(NO_PROFILE)

            profile, latest = found
            metrics = calculate_profile_metrics(profile, latest)
            if metrics and (
                latest.bmr_calories != metrics["bmr_calories"]
                or latest.tdee_calories != metrics["tdee_calories"]
            ):
                # stored values are stale (profile changed since the weigh-in)
                await ProfileTrackingRepository(db).update(latest, metrics)
                await db.commit()

            data = _view(profile, latest)
    except SQLAlchemyError:
        _LOG.exception("Error getting profile for %s", ctx.user_id)
        return error("Failed to get profile. Please try again.")

    return json_result(data)


# ───────────────────────── upsert ───────────────────────────
async def update_profile(params: UpdateProfileParams, ctx: ToolContext) -> ToolResult:
    problem = _range_problem(params)
    if problem:
        return error(problem)

    profile_changes = params.profile_changes()
    tracking_changes = params.tracking_changes()

    try:
        async with ctx.database.session() as db:
            profiles = UserProfileRepository(db)
            tracking = ProfileTrackingRepository(db)

            profile = await profiles.get(ctx.user_id)
            if profile is None:
                if any(f not in profile_changes for f in CREATE_FIELDS):
                    return error(CREATE_REQUIRES)
                profile = await profiles.create(user_id=ctx.user_id, **profile_changes)
            elif profile_changes:
                await profiles.update(profile, profile_changes)

            if tracking_changes:
                today = ctx.today()
                row = await tracking.for_date(ctx.user_id, today)
                if row is not None:
                    await tracking.update(row, tracking_changes)
                else:
                    row = await tracking.create(
                        user_id=ctx.user_id, recorded_date=today, **tracking_changes
                    )

                metrics = calculate_profile_metrics(profile, row)
                if metrics:
                    await tracking.update(row, metrics)

            await db.commit()
            data = _view(profile, await tracking.latest(ctx.user_id))
    except SQLAlchemyError:
        _LOG.exception("Error updating profile for %s", ctx.user_id)
        return error("Failed to update profile. Please try again.")

    data["message"] = "Profile updated successfully"
    return json_result(data)


# ───────────────────────── history ──────────────────────────
async def get_profile_history(params: ProfileHistoryParams, ctx: ToolContext) -> ToolResult:
    def _d(value: str | None) -> date | None:
        return date.fromisoformat(value) if value else None

    try:
        async with ctx.database.session() as db:
            rows = await ProfileTrackingRepository(db).history(
                ctx.user_id,
                day=_d(params.date),
                start=_d(params.start_date),
                end=_d(params.end_date),
                limit=params.limit,
                offset=params.offset,
            )
            history = [TrackingOut.model_validate(r).model_dump(mode="json") for r in rows]
            statistics = summarize(rows)
    except SQLAlchemyError:
        _LOG.exception("Error getting profile history for %s", ctx.user_id)
        return error("Failed to get profile history. Please try again.")

    return json_result(
        {
            "tracking_history": history,
            "statistics": statistics,
            "query_info": {
                "total_entries": len(history),
                "date_filter": params.date,
                "date_range": (
                    {"start": params.start_date, "end": params.end_date}
                    if params.start_date and params.end_date
                    else None
                ),
                "limit": params.limit,
                "offset": params.offset,
            },
        }
    )
