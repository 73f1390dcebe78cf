"""
MCP transport for the tool registry.

A low-level `mcp` Server lists/calls the tools from `api.v1.router` and is
served over stateless streamable HTTP and over the legacy SSE transport.  The
caller's identity is resolved by the HTTP gate and handed over through
`current_identity`.
"""
from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from api.v1.base import ToolContext
from api.v1.router import TOOLS, dispatch
from services.auth import Identity
from services.db import Database

_LOG = logging.getLogger(__name__)

SERVER_NAME = "Calorie Tracker Server"

current_identity: ContextVar[Identity | None] = ContextVar("current_identity", default=None)


class ToolCallError(Exception):
    """Raised so the MCP server reports the text with isError=True."""


def build_server(database: Database | None) -> Server:
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema())
            for t in TOOLS.values()
        ]

    # arguments are checked by dispatch so every violated field is reported
    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        ctx = ToolContext(database=database, identity=current_identity.get())
        result = await dispatch(name, arguments, ctx)
        if result.is_error:
            raise ToolCallError(result.text)
        return [types.TextContent(type="text", text=c.text) for c in result.content]

    return server


class McpEndpoint:
    """ASGI app forwarding every request to the session manager."""

    def __init__(self, database: Database | None) -> None:
        self.sessions = StreamableHTTPSessionManager(
            app=build_server(database), stateless=True, json_response=True
        )

    def run(self):
        return self.sessions.run()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.sessions.handle_request(scope, receive, send)


class SseEndpoint:
    """Legacy SSE transport: GET opens the stream, POST delivers messages."""

    def __init__(self, database: Database | None, message_path: str = "/sse/message") -> None:
        self.server = build_server(database)
        self.message_path = message_path
        self.transport = SseServerTransport(message_path)

    async def stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with self.transport.connect_sse(scope, receive, send) as (read, write):
            await self.server.run(read, write, self.server.create_initialization_options())

    async def message(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.transport.handle_post_message(scope, receive, send)

    def routes(self) -> list[Route]:
        return [
            Route("/sse", endpoint=_Asgi(self.stream), methods=["GET"]),
            Route(self.message_path, endpoint=_Asgi(self.message), methods=["POST"]),
        ]


class _Asgi:
    # Route treats plain functions/methods as request handlers; wrap raw ASGI callables
    def __init__(self, app) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)
