from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, Field


def _calendar_date(value: str) -> str:
    # the regex lets 2024-02-31 through
    date.fromisoformat(value)
    return value


DateStr = Annotated[
    str,
    Field(
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Date in YYYY-MM-DD format",
    ),
    AfterValidator(_calendar_date),
]

Limit = Annotated[int, Field(ge=1, le=100, description="Maximum number of rows to return")]
Offset = Annotated[int, Field(ge=0, description="Number of rows to skip")]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
