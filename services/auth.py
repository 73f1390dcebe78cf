"""
Bearer-token authentication.

API keys are never stored: users carry the SHA-256 fingerprint of their key
and every request is matched by hashing the presented token.
"""
from __future__ import annotations

import functools
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from services.db import Database
from services.repositories import UserRepository

_LOG = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
UNAUTHORIZED_MESSAGE = (
    "Unauthorized. Please provide a valid API key in the Authorization header."
)


def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest (64 lowercase chars) of the UTF-8 encoded key."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Identity:
    user_id: str
    is_admin: bool = False


class Authenticator:
    def __init__(
        self,
        database: Database | None,
        hasher: Callable[[str], str] = hash_api_key,
    ) -> None:
        self._db = database
        self._hash = hasher

    async def authenticate(self, request: Request) -> Identity | None:
        header = request.headers.get("Authorization")
        if not header or not header.startswith(BEARER_PREFIX):
            return None
        if self._db is None:
            return None

        fingerprint = self._hash(header[len(BEARER_PREFIX):])
        try:
            async with self._db.session() as session:
                user = await UserRepository(session).find_by_api_key_hash(fingerprint)
        except Exception:
            # fail closed: callers only ever see "unauthenticated"
            _LOG.exception("Database authentication error")
            return None

        if user is None:
            return None
        return Identity(user_id=user.id, is_admin=user.role == "admin")


Handler = Callable[..., Awaitable[Response]]


def with_auth(authenticator: Authenticator) -> Callable[[Handler], Handler]:
    """
    Gate a handler `(request, *args, identity)` behind the authenticator.

    The returned handler takes `(request, *args)`.  Anonymous callers get a
    401 JSON body and the wrapped handler never runs; otherwise its response
    (or exception) is passed through untouched.
    """

    def decorate(handler: Handler) -> Handler:
        @functools.wraps(handler)
        async def gated(request: Request, *args: Any) -> Response:
            identity = await authenticator.authenticate(request)
            if identity is None:
                return JSONResponse({"error": UNAUTHORIZED_MESSAGE}, status_code=401)
            return await handler(request, *args, identity)

        return gated

    return decorate
