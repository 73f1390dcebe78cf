"""Shared fixtures-as-functions for the async tests (driven by asyncio.run)."""
from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import date

from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from api.v1.base import ToolContext, ToolResult
from services.auth import Identity, hash_api_key
from services.db import Database
from services.repositories import UserRepository

FIXED_DAY = date(2024, 3, 15)


@asynccontextmanager
async def memory_db(create: bool = True):
    db = Database.from_url("sqlite+aiosqlite://", poolclass=StaticPool)
    if create:
        await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


async def add_user(
    db: Database,
    *,
    email: str,
    api_key: str,
    role: str = "user",
    name: str = "Test User",
) -> str:
    async with db.session() as s:
        user = await UserRepository(s).create(
            name=name, email=email, api_key_hash=hash_api_key(api_key), role=role
        )
        await s.commit()
        return user.id


def tool_ctx(
    db: Database | None,
    user_id: str | None,
    *,
    is_admin: bool = False,
    today: date = FIXED_DAY,
) -> ToolContext:
    identity = Identity(user_id, is_admin) if user_id else None
    return ToolContext(database=db, identity=identity, today=lambda: today)


def fake_request(headers: dict[str, str] | None = None) -> Request:
    raw = [
        (k.lower().encode("latin-1"), v.encode("latin-1"))
        for k, v in (headers or {}).items()
    ]
    return Request(
        {"type": "http", "method": "GET", "path": "/", "headers": raw, "query_string": b""}
    )


def payload(result: ToolResult) -> dict:
    assert not result.is_error, result.text
    return json.loads(result.text)
