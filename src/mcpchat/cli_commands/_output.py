"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from mcpchat.core.messages import Message
    from mcpchat.tools.registry import ToolDescriptor

console = Console()

_ROLE_LABELS = {
    "system": "[magenta]System[/magenta]",
    "user": "[green]You[/green]",
    "assistant": "[cyan]Assistant[/cyan]",
    "tool": "[yellow]Tool[/yellow]",
}


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when *verbose*, otherwise WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def print_banner(title: str, welcome: str | None = None) -> None:
    border = "=" * (len(title) + 4)
    console.print(f"\n{border}\n  [bold]{escape(title)}[/bold]\n{border}")
    if welcome:
        console.print(f"\n{escape(welcome)}\n")


def print_chunk(text: str) -> None:
    """Write streamed assistant text without a trailing newline."""
    console.print(text, end="", markup=False, highlight=False, soft_wrap=True)


def print_error(text: str) -> None:
    console.print(f"[red]{escape(text)}[/red]")


def print_info(text: str) -> None:
    console.print(f"[dim]{escape(text)}[/dim]")


def print_help(*, mcp: bool = False) -> None:
    table = Table(title="Commands", show_header=False)
    table.add_column("Command", style="cyan")
    table.add_column("Description")
    rows = [
        ("/help", "Show this help message"),
        ("/clear", "Clear the screen"),
        ("/history", "Show conversation history"),
        ("/reset", "Reset conversation"),
        ("/tools", "List available tools"),
        ("/quit", "Exit the application"),
    ]
    if mcp:
        rows += [
            ("/mcp", "Show MCP status"),
            ("/servers", "Show detailed MCP server information"),
        ]
    for command, description in rows:
        table.add_row(command, description)
    console.print(table)


def print_history(messages: list[Message]) -> None:
    """Print the conversation; tool messages show their tool name."""
    console.print("\n[bold]Conversation History[/bold]")
    for message in messages:
        label = _ROLE_LABELS[message.role]
        if message.role == "tool":
            label = f"{label} ({escape(message.name or '')})"
        text = message.content
        if message.tool_calls:
            calls = ", ".join(tc.function.name for tc in message.tool_calls)
            text = f"{text} [calls: {calls}]".strip()
        console.print(f"{label}: {escape(_truncate(text, 200))}")


def print_tools_table(tools: list[ToolDescriptor], *, title: str = "Available Tools") -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for tool in tools:
        table.add_row(tool.name, _truncate(tool.description))
    console.print(table)


def print_servers_table(servers: list[dict[str, Any]]) -> None:
    """Pretty-print ``MCPClientManager.server_info()`` output."""
    table = Table(title="MCP Servers")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Tools")
    for server in servers:
        status = "[green]connected[/green]" if server["connected"] else "[red]disconnected[/red]"
        detail = ", ".join(server["tools"]) or escape(server.get("error") or "-")
        table.add_row(server["name"], status, _truncate(detail))
    console.print(table)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
