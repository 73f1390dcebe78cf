# api/v1/router.py
"""
Tool registry: name → (description, parameter model, handler).

`dispatch` is the only entry point used by the transport.  It rejects
anonymous callers, validates arguments against the tool's pydantic model and
only then runs the handler, so handlers always see validated parameters.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from . import entries, profile, users
from .base import DB_UNAVAILABLE, ToolContext, ToolResult, auth_error, error, validation_error
from .schemas import (
    AddEntryParams,
    DeleteEntryParams,
    GetProfileParams,
    ListEntriesParams,
    ProfileHistoryParams,
    RegisterUserParams,
    RevokeUserParams,
    UpdateEntryParams,
    UpdateProfileParams,
)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    params: type[BaseModel]
    handler: Callable[[Any, ToolContext], Awaitable[ToolResult]]

    def input_schema(self) -> dict[str, Any]:
        return self.params.model_json_schema()


TOOLS: dict[str, Tool] = {
    t.name: t
    for t in (
        Tool(
            "list_entries",
            "List food entries for a specific date with pagination. "
            "Returns daily calorie intake and nutritional data.",
            ListEntriesParams,
            entries.list_entries,
        ),
        Tool(
            "add_entry",
            "Add a new food entry to the calorie tracker",
            AddEntryParams,
            entries.add_entry,
        ),
        Tool(
            "update_entry",
            "Update an existing food entry",
            UpdateEntryParams,
            entries.update_entry,
        ),
        Tool(
            "delete_entry",
            "Delete a food entry",
            DeleteEntryParams,
            entries.delete_entry,
        ),
        Tool(
            "register_user",
            "Register a new user (admin only)",
            RegisterUserParams,
            users.register_user,
        ),
        Tool(
            "revoke_user",
            "Revoke a user's API key by user_id or email (admin only)",
            RevokeUserParams,
            users.revoke_user,
        ),
        Tool(
            "get_profile",
            "Get current user profile with calculated BMR/TDEE metrics",
            GetProfileParams,
            profile.get_profile,
        ),
        Tool(
            "update_profile",
            "Update user profile information and tracking data",
            UpdateProfileParams,
            profile.update_profile,
        ),
        Tool(
            "get_profile_history",
            "Get historical profile tracking data with optional date filtering",
            ProfileHistoryParams,
            profile.get_profile_history,
        ),
    )
}


async def dispatch(name: str, arguments: dict[str, Any] | None, ctx: ToolContext) -> ToolResult:
    tool = TOOLS.get(name)
    if tool is None:
        return error(f"Unknown tool: {name}")

    if ctx.identity is None:
        return auth_error()

    try:
        params = tool.params.model_validate(arguments or {})
    except ValidationError as exc:
        return validation_error(exc)

    if ctx.database is None:
        return error(DB_UNAVAILABLE)

    return await tool.handler(params, ctx)
