"""``mcpchat servers`` — connect to configured MCP servers and list their tools."""

from __future__ import annotations

import asyncio
import sys
from typing import Any

import click

from mcpchat.cli_commands._output import (
    configure_logging,
    console,
    print_error,
    print_json,
    print_servers_table,
    print_tools_table,
)


@click.command()
@click.option(
    "--config",
    "config_path",
    default="mcp-servers.json",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="MCP server configuration file (.json or .yaml).",
)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of tables.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def servers(config_path: str, as_json: bool, verbose: bool) -> None:
    """Connect to every configured MCP server and show its tools."""
    from mcpchat.errors import ConfigurationError
    from mcpchat.protocols.mcp.manager import MCPClientManager

    configure_logging(verbose)

    async def _discover() -> tuple[list[dict[str, Any]], list[Any]]:
        manager = MCPClientManager()
        try:
            await manager.initialize(config_path)
            return manager.server_info(), manager.list_tools()
        finally:
            await manager.shutdown()

    try:
        info, tools = asyncio.run(_discover())
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        sys.exit(1)

    if as_json:
        print_json({"servers": info, "tools": [t.to_schema() for t in tools]})
        return

    if not info:
        console.print("[yellow]No MCP servers configured.[/yellow]")
        return

    print_servers_table(info)
    if tools:
        print_tools_table(tools, title="Discovered Tools")
