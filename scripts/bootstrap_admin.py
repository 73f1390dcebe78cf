"""
scripts/bootstrap_admin.py
────────────────────────────────────────────────────────────────────────
Create the schema (if missing) and the first admin user.  Every other
account is created through the `register_user` tool by an admin.

    python -m scripts.bootstrap_admin --name "Ops" --email ops@example.com
    python -m scripts.bootstrap_admin --name "Ops" --email ops@example.com --api-key s3cret

The raw API key is printed once; only its SHA-256 fingerprint is stored.
"""
from __future__ import annotations

import asyncio
import sys
from argparse import ArgumentParser

from dotenv import load_dotenv
load_dotenv()

from api.v1.users import generate_api_key
from services.auth import hash_api_key
from services.db import Database, database_from_settings
from services.repositories import UserRepository


async def bootstrap(database: Database, name: str, email: str, api_key: str | None) -> tuple[str, str]:
    """Returns (user_id, raw api key).  Raises ValueError on conflicts."""
    await database.create_all()
    api_key = api_key or generate_api_key()

    async with database.session() as db:
        users = UserRepository(db)
        if await users.find_by_email(email):
            raise ValueError(f"User with email {email} already exists.")
        if await users.find_by_api_key_hash(hash_api_key(api_key)):
            raise ValueError("API key already exists. Please provide a different one.")

        user = await users.create(
            name=name, email=email, api_key_hash=hash_api_key(api_key), role="admin"
        )
        await db.commit()
    return user.id, api_key


async def _main(argv: list[str] | None = None) -> int:
    ap = ArgumentParser(description="Create the first admin user")
    ap.add_argument("--name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--api-key", help="explicit key (random if omitted)")
    args = ap.parse_args(argv)

    database = database_from_settings()
    if database is None:
        print("Set DATABASE_URL or CLOUD_SQL_CONNECTION_NAME first", file=sys.stderr)
        return 1

    try:
        user_id, api_key = await bootstrap(database, args.name, args.email, args.api_key)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        await database.dispose()

    print(f"Admin {args.name} created with ID {user_id}")
    print(f"API Key: {api_key}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_main()))
