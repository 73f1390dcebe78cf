# api/v1/entries.py
from __future__ import annotations

import json
import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from api.v1.base import ToolContext, ToolResult, error, success
from api.v1.schemas import (
    AddEntryParams,
    DeleteEntryParams,
    EntryOut,
    ListEntriesParams,
    UpdateEntryParams,
)
from services.repositories import FoodEntryRepository

_LOG = logging.getLogger(__name__)


async def list_entries(params: ListEntriesParams, ctx: ToolContext) -> ToolResult:
    day = date.fromisoformat(params.date) if params.date else ctx.today()
    try:
        async with ctx.database.session() as db:
            rows = await FoodEntryRepository(db).list_for_date(
                ctx.user_id, day, limit=params.limit, offset=params.offset
            )
            entries = [EntryOut.model_validate(r).model_dump(mode="json") for r in rows]
    except SQLAlchemyError:
        _LOG.exception("Error listing entries for %s", ctx.user_id)
        return error("Failed to retrieve food entries. Please try again.")

    return success(
        f"Found {len(entries)} entries for {day.isoformat()}:\n"
        f"{json.dumps(entries, indent=2)}"
    )


async def add_entry(params: AddEntryParams, ctx: ToolContext) -> ToolResult:
    day = date.fromisoformat(params.entry_date) if params.entry_date else ctx.today()
    fields = params.model_dump(exclude={"entry_date"}, exclude_none=True)
    try:
        async with ctx.database.session() as db:
            entry = await FoodEntryRepository(db).create(
                user_id=ctx.user_id, entry_date=day, **fields
            )
            await db.commit()
    except SQLAlchemyError:
        _LOG.exception("Error adding entry for %s", ctx.user_id)
        return error("Failed to add food entry. Please try again.")

    return success(
        f'Successfully added "{entry.food_name}" ({entry.calories} calories) '
        f"with ID {entry.id} on {day.isoformat()}"
    )


async def update_entry(params: UpdateEntryParams, ctx: ToolContext) -> ToolResult:
    try:
        async with ctx.database.session() as db:
            entry = await FoodEntryRepository(db).update(
                params.entry_id, ctx.user_id, params.changes()
            )
            if entry is None:
                return error(
                    f"Entry {params.entry_id} not found or you don't have "
                    "permission to update it."
                )
            await db.commit()
    except SQLAlchemyError:
        _LOG.exception("Error updating entry %s", params.entry_id)
        return error("Failed to update food entry. Please try again.")

    return success(f"Successfully updated entry {params.entry_id}")


async def delete_entry(params: DeleteEntryParams, ctx: ToolContext) -> ToolResult:
    try:
        async with ctx.database.session() as db:
            deleted = await FoodEntryRepository(db).delete(params.entry_id, ctx.user_id)
            if not deleted:
                return error(
                    f"Entry {params.entry_id} not found or you don't have "
                    "permission to delete it."
                )
            await db.commit()
    except SQLAlchemyError:
        _LOG.exception("Error deleting entry %s", params.entry_id)
        return error("Failed to delete food entry. Please try again.")

    return success(f"Successfully deleted entry {params.entry_id}")
