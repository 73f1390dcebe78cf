# api/v1/base.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from services.auth import Identity, hash_api_key
from services.db import Database, new_id

AUTH_REQUIRED = (
    "Authentication required. Please provide a valid API key in the Authorization header."
)
DB_UNAVAILABLE = "Database not available"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class ToolContext:
    """Everything a tool needs besides its parameters."""

    database: Database | None
    identity: Identity | None
    hasher: Callable[[str], str] = hash_api_key
    new_id: Callable[[], str] = new_id
    today: Callable[[], date] = field(default=utc_today)

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if self.identity else None

    @property
    def is_admin(self) -> bool:
        return bool(self.identity and self.identity.is_admin)


# ───────────────────────── result envelope ──────────────────────────
class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: list[TextContent]
    is_error: bool = Field(False, serialization_alias="isError")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.content)


def success(message: str) -> ToolResult:
    return ToolResult(content=[TextContent(text=message)])


def error(message: str) -> ToolResult:
    return ToolResult(content=[TextContent(text=message)], is_error=True)


def auth_error() -> ToolResult:
    return error(AUTH_REQUIRED)


def json_result(data: Any) -> ToolResult:
    return success(json.dumps(data, indent=2, default=str))


def validation_error(exc: ValidationError) -> ToolResult:
    """All violated fields in one message: `field: msg, field: msg`."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "params"
        parts.append(f"{loc}: {err['msg']}")
    return error(f"Validation error: {', '.join(parts)}")
