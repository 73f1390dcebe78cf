from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from api.v1.base import ToolContext, ToolResult, error, success
from api.v1.schemas import RegisterUserParams, RevokeUserParams
from services.repositories import UserRepository

_LOG = logging.getLogger(__name__)


def generate_api_key() -> str:
    return f"api-{uuid.uuid4()}"


# ───────────────────────── register ─────────────────────────
async def register_user(params: RegisterUserParams, ctx: ToolContext) -> ToolResult:
    if not ctx.is_admin:
        return error("Admin access required to register new users.")

    api_key = params.api_key or generate_api_key()
    api_key_hash = ctx.hasher(api_key)

    try:
        async with ctx.database.session() as db:
            users = UserRepository(db)

            if await users.find_by_email(params.email):
                return error(f"User with email {params.email} already exists.")

            if await users.find_by_api_key_hash(api_key_hash):
                return error("API key already exists. Please provide a different one.")

            user = await users.create(
                user_id=ctx.new_id(),
                name=params.name,
                email=params.email,
                api_key_hash=api_key_hash,
                role="admin" if params.is_admin else "user",
            )
            await db.commit()
    except SQLAlchemyError:
        _LOG.exception("Error registering user %s", params.email)
        return error("Failed to register user. Please try again.")

    _LOG.info("Admin %s registered user %s", ctx.user_id, user.id)
    return success(
        f'Successfully registered user "{user.name}" with ID {user.id}.\n'
        f"API Key: {api_key}\n"
        f"Email: {user.email}"
    )


# ───────────────────────── revoke ───────────────────────────
async def revoke_user(params: RevokeUserParams, ctx: ToolContext) -> ToolResult:
    if not ctx.is_admin:
        return error("Admin access required to revoke user API keys.")

    try:
        async with ctx.database.session() as db:
            users = UserRepository(db)
            if params.user_id is not None:
                target = await users.find_by_id(params.user_id)
            else:
                target = await users.find_by_email(params.email)

            if target is None:
                return error("User not found.")

            if target.id == ctx.user_id:
                return error("Cannot revoke your own API key.")

            await users.revoke_api_key(target.id)
            await db.commit()
    except SQLAlchemyError:
        _LOG.exception("Error revoking API key for %s", params.user_id or params.email)
        return error("Failed to revoke user API key. Please try again.")

    _LOG.info("Admin %s revoked API key of user %s", ctx.user_id, target.id)
    return success(
        f'Successfully revoked API key for user "{target.name}" '
        f"({target.email}). User ID: {target.id}"
    )
