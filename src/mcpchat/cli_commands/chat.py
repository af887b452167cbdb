"""``mcpchat chat`` — interactive streaming chat session."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from mcpchat.cli_commands._output import (
    configure_logging,
    console,
    print_banner,
    print_chunk,
    print_error,
    print_help,
    print_history,
    print_info,
    print_servers_table,
    print_tools_table,
)
from mcpchat.errors import ConfigurationError

if TYPE_CHECKING:
    from mcpchat.core.assistant import Assistant

_TOOLS_PROMPT = (
    "You are a helpful AI assistant with access to various tools. "
    "Use the available tools when needed to help answer questions and perform tasks. "
    "Be clear about what tools you are using and explain the results."
)
_MCP_PROMPT = (
    "You are a helpful AI assistant with access to MCP (Model Context Protocol) servers "
    "that provide various tools and resources. "
    "Use the available MCP tools when needed to help answer questions and perform tasks."
)
_ENV_HELP = [
    "Please check your environment variables:",
    "- OPENAI_API_KEY or OPENAI_KEY (required)",
    "- OPENAI_BASE_URL (optional)",
    "- MODEL_ID (optional, defaults to gpt-3.5-turbo)",
]


class ChatSession:
    """Reads user lines, dispatches slash commands and streams replies."""

    def __init__(self, assistant: Assistant, *, mcp: bool) -> None:
        self.assistant = assistant
        self.mcp = mcp
        self.running = False

    async def start(self) -> None:
        """Connect MCP servers (if enabled) and report how many came up."""
        if not self.mcp:
            return
        try:
            await self.assistant.initialize_providers()
        except ConfigurationError as exc:
            print_error(f"MCP initialization failed: {exc}")
            return
        count = self.assistant.provider_count
        if count:
            print_info(f"{count} MCP server(s) connected")
        else:
            print_info("No MCP servers found")

    async def handle(self, line: str) -> None:
        """Handle one line of user input."""
        text = line.strip()
        if not text:
            return
        if text.startswith("/"):
            self.command(text)
            return

        console.print("[bold cyan]Assistant:[/bold cyan] ", end="")
        async for chunk in self.assistant.send_message(text):
            print_chunk(chunk)
        console.print()

    def command(self, text: str) -> None:
        cmd = text.lower()
        if cmd in ("/quit", "/exit"):
            print_info("Goodbye!")
            self.running = False
        elif cmd == "/help":
            print_help(mcp=self.mcp)
        elif cmd == "/clear":
            console.clear()
        elif cmd == "/history":
            print_history(self.assistant.get_history())
        elif cmd == "/reset":
            self.assistant.reset_history()
            print_info("Conversation history cleared.")
        elif cmd == "/tools":
            print_tools_table(self.assistant.tools)
        elif cmd in ("/mcp", "/servers"):
            if not self.mcp:
                print_error("MCP is not enabled.")
            elif cmd == "/mcp":
                self._show_mcp_status()
            else:
                print_servers_table(self.assistant.provider_info())
        else:
            print_error(f"Unknown command: {text}")
            print_info('Type "/help" to see available commands.')

    def _show_mcp_status(self) -> None:
        if not self.assistant.providers_enabled:
            console.print("MCP status: [red]not initialized[/red]")
            return
        info = self.assistant.provider_info()
        total = sum(server["tool_count"] for server in info if server["connected"])
        console.print(
            f"MCP status: [green]{self.assistant.provider_count} server(s) connected[/green], "
            f"{total} tool(s)"
        )

    def run(self) -> None:
        """Run the read-eval loop until ``/quit``, EOF or Ctrl+C."""
        self.running = True
        with asyncio.Runner() as runner:
            try:
                runner.run(self.start())
                while self.running:
                    try:
                        line = console.input("[bold green]You:[/bold green] ")
                    except EOFError:
                        break
                    runner.run(self.handle(line))
            except KeyboardInterrupt:
                print_info("\nGoodbye!")
            finally:
                runner.run(self.assistant.aclose())


@click.command()
@click.option("--no-mcp", is_flag=True, help="Do not connect to MCP servers.")
@click.option("--tools", "with_tools", is_flag=True, help="Enable the built-in demo tools.")
@click.option(
    "--confirm-elicitation",
    is_flag=True,
    help="Ask accept/decline/cancel before answering MCP input requests.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export OpenTelemetry spans to the console.")
def chat(
    no_mcp: bool,
    with_tools: bool,
    confirm_elicitation: bool,
    verbose: bool,
    telemetry: bool,
) -> None:
    """Start an interactive chat session."""
    from mcpchat.cli_commands.elicitation import CLIElicitationHandler
    from mcpchat.core.assistant import Assistant
    from mcpchat.core.config import load_config
    from mcpchat.tools.builtin import BUILTIN_TOOLS

    configure_logging(verbose)
    if telemetry:
        from mcpchat.utils.telemetry import configure_telemetry

        configure_telemetry()

    try:
        config = load_config()
    except ConfigurationError as exc:
        print_error(f"Configuration error: {exc}")
        for line in _ENV_HELP:
            print_info(line)
        sys.exit(1)

    mcp = not no_mcp
    update: dict[str, object] = {"mcp_enabled": mcp}
    if with_tools:
        config = config.with_tools(BUILTIN_TOOLS)
        update["system"] = _TOOLS_PROMPT
    elif mcp:
        update["system"] = _MCP_PROMPT
    config = config.model_copy(update=update)

    assistant = Assistant(config)
    if mcp:
        assistant.set_elicitation_handler(CLIElicitationHandler(confirm=confirm_elicitation))

    tool_names = ", ".join(t.name for t in config.tools)
    welcome = 'Type "/help" for available commands.'
    if tool_names:
        welcome = f"Built-in tools: {tool_names}\n{welcome}"
    print_banner("MCP Chat", welcome)

    ChatSession(assistant, mcp=mcp).run()
