"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from mcpchat.cli_commands.chat import chat
    from mcpchat.cli_commands.servers import servers

    cli.add_command(chat)
    cli.add_command(servers)
