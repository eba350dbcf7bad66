"""
Dispatch server: resolves an action name to its registry entry, runs the
handler against the shared AgentContext and renders the response text.

Served over MCP either on stdio or on HTTP Server-Sent Events, or used for a
single request/response call (``call_once``).
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

import mcp.server.stdio
import mcp.types as types
import uvicorn
from mcp.server.fastmcp.utilities.logging import get_logger
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Mount, Route

from solana_agent_mcp.actions import ActionRegistry
from solana_agent_mcp.config import MCP_SERVER_NAME, SERVER_VERSION
from solana_agent_mcp.context import AgentContext
from solana_agent_mcp.envelope import UNKNOWN_ERROR, Envelope, UnknownAction
from solana_agent_mcp.exceptions import UnknownActionError
from solana_agent_mcp.validation import to_json_schema

logger = get_logger(__name__)

DispatchResult = Union[Envelope, UnknownAction]


class ServerState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    DISPATCHING = "dispatching"
    CLOSED = "closed"


class ActionDispatcher:
    def __init__(self, agent: AgentContext, registry: ActionRegistry):
        self.agent = agent
        self.registry = registry

    async def dispatch(self, action_name: str, arguments: Optional[Dict[str, Any]] = None) -> DispatchResult:
        """
        Runs one action. Unknown names are answered without invoking anything;
        an exception escaping the handler becomes a failure envelope.
        """
        try:
            descriptor = self.registry.lookup(action_name)
        except UnknownActionError:
            logger.warning(f"Unknown action requested: {action_name}")
            return UnknownAction(name=str(action_name))

        logger.info(f"Dispatching {descriptor.name.value}")
        try:
            result = await descriptor.handler(self.agent, arguments if arguments is not None else {})
        except Exception as e:
            logger.exception(f"Error executing {descriptor.name.value}: {e}")
            return Envelope.failure(descriptor.result_fields, f"Error: {e}", code=UNKNOWN_ERROR)

        if isinstance(result, Envelope):
            return result
        # handlers registered by hand may return the bare result
        try:
            if len(descriptor.result_fields) == 1:
                result = {descriptor.result_fields[0]: result}
            return Envelope.success(descriptor.result_fields, result)
        except (TypeError, ValueError) as e:
            logger.error(f"Malformed result from {descriptor.name.value}: {e}")
            return Envelope.failure(descriptor.result_fields, f"Error: {e}", code=UNKNOWN_ERROR)


class DispatchServer:
    """
    MCP front end for an ActionDispatcher.

    Lifecycle: IDLE -> LISTENING -> (DISPATCHING -> LISTENING)* -> CLOSED.
    Several requests can be in flight on concurrent transports; the state stays
    DISPATCHING until the last one finishes.
    """

    def __init__(self, dispatcher: ActionDispatcher, name: str = MCP_SERVER_NAME):
        self.dispatcher = dispatcher
        self.state = ServerState.IDLE
        self._in_flight = 0
        self.server = Server(name, version=SERVER_VERSION)
        self.server.list_tools()(self.list_tools)
        # tool inputs are validated by the adapters, not the MCP layer
        self.server.call_tool(validate_input=False)(self.call_tool)

    def _transition(self, state: ServerState) -> None:
        if state != self.state:
            logger.debug(f"Server state {self.state.value} -> {state.value}")
            self.state = state

    def start(self) -> None:
        if self.state != ServerState.IDLE:
            raise RuntimeError(f"Cannot start server in state {self.state.value}")
        self._transition(ServerState.LISTENING)

    async def close(self) -> None:
        if self.state == ServerState.CLOSED:
            return
        self._transition(ServerState.CLOSED)
        await self.dispatcher.agent.aclose()
        logger.info("Server closed.")

    async def handle(self, name: str, arguments: Optional[Dict[str, Any]]) -> DispatchResult:
        if self.state not in (ServerState.LISTENING, ServerState.DISPATCHING):
            raise RuntimeError(f"Server is not listening (state: {self.state.value})")
        self._in_flight += 1
        self._transition(ServerState.DISPATCHING)
        try:
            return await self.dispatcher.dispatch(name, arguments)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self.state == ServerState.DISPATCHING:
                self._transition(ServerState.LISTENING)

    # --- MCP handlers ---

    async def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=descriptor.name.value,
                description=descriptor.description,
                inputSchema=to_json_schema(descriptor.input_schema),
            )
            for descriptor in self.dispatcher.registry
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        result = await self.handle(name, arguments or {})
        return [types.TextContent(type="text", text=result.render())]

    # --- Transports ---

    async def call_once(self, action: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Request/response mode: one dispatch, then close."""
        self.start()
        try:
            result = await self.handle(action, arguments or {})
            return result.render()
        finally:
            await self.close()

    async def run_stdio(self) -> None:
        """Serves requests over stdin/stdout until the client disconnects."""
        self.start()
        logger.info(f"Serving {len(self.dispatcher.registry)} actions on stdio")
        try:
            async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()

    def sse_app(self, debug: bool = False) -> Starlette:
        sse = SseServerTransport("/messages/")

        async def handle_sse(request: Request) -> Response:
            async with sse.connect_sse(request.scope, request.receive, request._send) as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
            return Response()

        return Starlette(
            debug=debug,
            routes=[
                Route("/sse", endpoint=handle_sse),
                Mount("/messages/", app=sse.handle_post_message),
            ],
        )

    async def run_sse(self, host: str, port: int) -> None:
        """Serves requests over HTTP Server-Sent Events until shutdown."""
        self.start()
        logger.info(f"Serving {len(self.dispatcher.registry)} actions on http://{host}:{port}/sse")
        server = uvicorn.Server(uvicorn.Config(self.sse_app(), host=host, port=port))
        try:
            await server.serve()
        finally:
            await self.close()
