from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.routing import Route

from config import settings
from services.auth import Authenticator, Identity, with_auth
from services.db import Database, database_from_settings
from services.mcp import McpEndpoint, SseEndpoint, current_identity

_LOG = logging.getLogger(__name__)

ENDPOINTS = [
    {"path": "/mcp", "description": "MCP endpoint (streamable HTTP)"},
    {"path": "/sse", "description": "MCP endpoint (SSE stream)"},
    {"path": "/sse/message", "description": "MCP message endpoint for SSE sessions"},
]


def create_app(database: Database | None = None, *, from_settings: bool = False) -> FastAPI:
    if from_settings:
        database = database_from_settings()

    mcp_endpoint = McpEndpoint(database)
    sse_endpoint = SseEndpoint(database)
    authenticator = Authenticator(database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with mcp_endpoint.run():
            yield
        if from_settings and database is not None:
            await database.dispose()

    app = FastAPI(title="Calorie Tracker API", version="1.0.0", lifespan=lifespan)

    # every path sits behind the API-key gate
    @app.middleware("http")
    @with_auth(authenticator)
    async def require_api_key(request: Request, call_next, identity: Identity):
        token = current_identity.set(identity)
        try:
            return await call_next(request)
        finally:
            current_identity.reset(token)

    app.router.routes.append(Route("/mcp", endpoint=mcp_endpoint))
    app.router.routes.extend(sse_endpoint.routes())

    @app.api_route("/{path:path}", methods=["GET", "POST"], tags=["meta"])
    async def info(path: str) -> dict:
        return {"message": "Calorie Tracker API", "endpoints": ENDPOINTS}

    return app


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app(from_settings=True)
