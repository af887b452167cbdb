"""Assistant — the streaming tool-calling conversation loop.

Each call to :meth:`Assistant.send_message` runs turns until the model
answers without tool calls::

    AwaitingModel -> StreamingResponse -> Done
                                       -> ExecutingTools -> AwaitingModel
                  (stream failure)     -> Terminated

Text is yielded to the caller as soon as it arrives.  Tool calls are executed
one at a time, in the order the model emitted them, and every result (or
failure) becomes a ``tool`` message the model sees on the next turn.  Only a
failure of the model stream itself ends the loop early.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from mcpchat.core.accumulator import DeltaAccumulator
from mcpchat.core.client import ModelClient
from mcpchat.core.messages import Message, MessageStore, ToolCall
from mcpchat.errors import StreamFormatError, StreamTransportError, ToolError
from mcpchat.protocols.mcp.manager import MCPClientManager
from mcpchat.tools.registry import ToolDescriptor, ToolRegistry
from mcpchat.utils.telemetry import ATTR_TOOL_CALLS, get_tracer, open_span

if TYPE_CHECKING:
    from mcpchat.core.config import AssistantConfig
    from mcpchat.protocols.mcp.client import ElicitationHandler
    from mcpchat.protocols.mcp.config import MCPConfig

_tracer = get_tracer(__name__)

logger = logging.getLogger(__name__)

_PREVIEW_LEN = 100


class Assistant:
    """A single conversation with a tool-calling model.

    Usage::

        assistant = Assistant(load_config())
        await assistant.initialize_providers()
        async for chunk in assistant.send_message("What's 25 + 17?"):
            print(chunk, end="")
        await assistant.aclose()
    """

    def __init__(
        self,
        config: AssistantConfig,
        *,
        client: ModelClient | None = None,
        registry: ToolRegistry | None = None,
        providers: MCPClientManager | None = None,
    ) -> None:
        self.config = config
        self._client = client or ModelClient(config)
        self._registry = registry or ToolRegistry()
        self._registry.register_all(config.tools)
        self._store = MessageStore(system=config.system)
        self._providers = providers
        if self._providers is None and config.mcp_enabled:
            self._providers = MCPClientManager()
        self._elicitation_handler: ElicitationHandler | None = None

    async def __aenter__(self) -> Assistant:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Tools and providers
    # ------------------------------------------------------------------

    @property
    def tools(self) -> list[ToolDescriptor]:
        return self._registry.list()

    def register_tool(self, descriptor: ToolDescriptor) -> None:
        self._registry.register(descriptor)

    def set_elicitation_handler(self, handler: ElicitationHandler) -> None:
        """Install the callback used when an MCP tool asks the user for input."""
        self._elicitation_handler = handler
        if self._providers is not None:
            self._providers.set_elicitation_handler(handler)

    async def initialize_providers(self, config: MCPConfig | str | Path | None = None) -> int:
        """Connect to the configured MCP servers and register their tools.

        Returns the number of tools loaded.  Once the servers are connected,
        further calls register nothing and return the same count.

        Raises:
            ConfigurationError: If the MCP server file cannot be loaded.
        """
        if self._providers is None:
            self._providers = MCPClientManager()
        if self._providers.is_initialized:
            return len(self._providers.list_tools())
        if self._elicitation_handler is not None:
            self._providers.set_elicitation_handler(self._elicitation_handler)

        await self._providers.initialize(config or self.config.mcp_config_path)
        tools = self._providers.list_tools()
        self._registry.register_all(tools)
        logger.info("Loaded %d MCP tools", len(tools))
        return len(tools)

    @property
    def providers_enabled(self) -> bool:
        return self._providers is not None and self._providers.is_initialized

    @property
    def provider_count(self) -> int:
        return self._providers.connected_count if self._providers is not None else 0

    def provider_info(self) -> list[dict[str, Any]]:
        return self._providers.server_info() if self._providers is not None else []

    async def aclose(self) -> None:
        """Disconnect all MCP servers."""
        if self._providers is not None:
            await self._providers.shutdown()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history(self) -> list[Message]:
        return self._store.snapshot()

    def reset_history(self) -> None:
        """Forget the conversation, keeping the system prompt."""
        self._store.reset()

    # ------------------------------------------------------------------
    # Conversation loop
    # ------------------------------------------------------------------

    async def send_message(self, content: str) -> AsyncIterator[str]:
        """Add a user message and stream the assistant's reply.

        Yields response text as it is generated, interleaved with short
        progress lines while tools run.
        """
        self._store.append(Message.user(content))

        while True:
            accumulator = DeltaAccumulator()
            try:
                async for delta in self._client.stream(
                    self._store.snapshot(), self._registry.schemas() or None
                ):
                    text = accumulator.feed(delta)
                    if text is not None:
                        yield text
                tool_calls = accumulator.finish()
            except (StreamTransportError, StreamFormatError) as exc:
                logger.warning("Model stream failed: %s", exc)
                error_message = f"Error: {exc}"
                self._store.append(Message.assistant(error_message))
                yield error_message
                return

            self._store.append(Message.assistant(accumulator.text, tool_calls or None))

            if not tool_calls:
                return

            plural = "s" if len(tool_calls) > 1 else ""
            yield f"\nExecuting {len(tool_calls)} tool call{plural}...\n"

            with open_span(_tracer, "assistant.tools", {ATTR_TOOL_CALLS: len(tool_calls)}) as span:
                for tool_call in tool_calls:
                    with trace.use_span(span):
                        line = await self._run_tool(tool_call)
                    yield line

            yield "\nProcessing results...\n"

    async def _run_tool(self, tool_call: ToolCall) -> str:
        """Execute one tool call, record its ``tool`` message and return a progress line."""
        name = tool_call.function.name
        try:
            result = await self._registry.execute(name, tool_call.function.arguments)
        except ToolError as exc:
            error_text = f"Error executing {name}: {exc}"
            self._store.append(Message.tool(tool_call.id, name, error_text))
            return f"{error_text}\n"

        serialized = _serialize_result(result)
        self._store.append(Message.tool(tool_call.id, name, serialized))
        preview = serialized[:_PREVIEW_LEN] + ("..." if len(serialized) > _PREVIEW_LEN else "")
        return f"  {name}: {preview}\n"


def _serialize_result(result: Any) -> str:
    """Encode a tool result as compact JSON."""
    return json.dumps(result, separators=(",", ":"), ensure_ascii=False, default=str)
