"""mcp-chat CLI entrypoint."""

from __future__ import annotations

import click

from mcpchat import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcpchat")
def main() -> None:
    """mcp-chat — streaming chat with tools and MCP servers."""


# Register subcommands
from mcpchat.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
