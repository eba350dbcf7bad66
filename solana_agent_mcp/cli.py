import asyncio
import json
from typing import List, Optional

import click
from mcp.server.fastmcp.utilities.logging import configure_logging, get_logger

from solana_agent_mcp.config import LOG_LEVEL, SSE_HOST, SSE_PORT
from solana_agent_mcp.context import AgentContext
from solana_agent_mcp.exceptions import AgentContextError, UnknownActionError
from solana_agent_mcp.server import ActionDispatcher, DispatchServer
from solana_agent_mcp.tools import build_registry

logger = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _split_actions(actions: Optional[str]) -> Optional[List[str]]:
    if not actions:
        return None
    return [name.strip() for name in actions.split(",") if name.strip()]


def _build_server(actions: Optional[str] = None) -> DispatchServer:
    try:
        registry = build_registry(_split_actions(actions))
    except UnknownActionError as e:
        raise click.BadParameter(str(e), param_hint="--actions") from e
    try:
        agent = AgentContext.from_env()
    except AgentContextError as e:
        raise click.ClickException(str(e)) from e
    return DispatchServer(ActionDispatcher(agent, registry))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=LOG_LEVEL,
    show_default=True,
    help="Logging level.",
)
def cli(log_level: str):
    """Solana agent actions served over MCP."""
    configure_logging(log_level.upper())


@cli.command()
@click.option("--transport", type=click.Choice(["stdio", "sse"]), default="stdio", help="Communication protocol.")
@click.option("--host", default=SSE_HOST, show_default=True, help="Host for SSE transport.")
@click.option("-p", "--port", type=int, default=SSE_PORT, show_default=True, help="Port for SSE transport.")
@click.option("--actions", default=None, help="Comma-separated action names to serve (default: all).")
def serve(transport: str, host: str, port: int, actions: Optional[str]):
    """Run the MCP server."""
    server = _build_server(actions)
    logger.info(f"Starting {server.server.name} ({transport})")
    if transport == "sse":
        asyncio.run(server.run_sse(host, port))
    else:
        asyncio.run(server.run_stdio())


@cli.command()
@click.argument("action")
@click.argument("arguments", required=False, default="")
def call(action: str, arguments: str):
    """
    Run one ACTION and print the response.

    ARGUMENTS is a JSON object or space-separated key=value pairs.
    """
    server = _build_server()
    click.echo(asyncio.run(server.call_once(action, arguments)))


@cli.command("list-actions")
@click.option("--actions", default=None, help="Comma-separated action names to list (default: all).")
def list_actions(actions: Optional[str]):
    """Print the registry entries as JSON."""
    try:
        registry = build_registry(_split_actions(actions))
    except UnknownActionError as e:
        raise click.BadParameter(str(e), param_hint="--actions") from e
    click.echo(json.dumps([descriptor.to_tool_entry() for descriptor in registry], indent=2))


def main():
    cli()
