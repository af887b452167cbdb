"""MCPClientManager — owns every configured MCP server connection.

Connects to all servers concurrently (best effort: one failing server never
blocks the others), exposes their tools as namespaced
:class:`~mcpchat.tools.registry.ToolDescriptor` objects, and relays
elicitation requests to a caller-supplied handler.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcpchat.errors import (
    ElicitationNotConfiguredError,
    ProtocolError,
    ProviderHandshakeError,
    ProviderNotConnectedError,
)
from mcpchat.protocols.mcp.client import ElicitationHandler, MCPClient
from mcpchat.protocols.mcp.config import MCPConfig, MCPServerConfig, load_mcp_config
from mcpchat.protocols.mcp.models import ElicitationRequest, ElicitationResponse, MCPToolDef
from mcpchat.tools.registry import ToolDescriptor, ToolExecutor
from mcpchat.utils.telemetry import ATTR_MCP_SERVER, ATTR_MCP_TOOL_COUNT, ATTR_TOOL_NAME, get_tracer

_tracer = get_tracer(__name__)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "mcp-servers.json"


@dataclass
class ProviderConnection:
    """Runtime state of one configured MCP server."""

    name: str
    connected: bool = False
    tools: list[MCPToolDef] = field(default_factory=lambda: list[MCPToolDef]())
    client: MCPClient | None = None
    error: str = ""


class MCPClientManager:
    """Connects to MCP servers and turns their tools into registry entries.

    Usage::

        manager = MCPClientManager()
        manager.set_elicitation_handler(ask_user)
        await manager.initialize("mcp-servers.json")
        registry.register_all(manager.list_tools())
        ...
        await manager.shutdown()
    """

    def __init__(self) -> None:
        self._servers: dict[str, ProviderConnection] = {}
        self._initialized = False
        self._elicitation_handler: ElicitationHandler | None = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def set_elicitation_handler(self, handler: ElicitationHandler | None) -> None:
        """Install the callback used when a server asks the user for input."""
        self._elicitation_handler = handler

    async def initialize(self, config: MCPConfig | str | Path | None = None) -> None:
        """Connect to every configured server.

        *config* may be an :class:`MCPConfig` or a path to the server file
        (default ``mcp-servers.json``).  Individual connection failures are
        logged and recorded; only an unloadable configuration raises.

        Raises:
            ConfigurationError: If the configuration file is unreadable or invalid.
        """
        if self._initialized:
            return

        if not isinstance(config, MCPConfig):
            config = load_mcp_config(config or DEFAULT_CONFIG_PATH)

        names = list(config.servers)
        results = await asyncio.gather(
            *[self._connect(name, config.servers[name]) for name in names],
            return_exceptions=True,
        )
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Failed to connect to MCP server '%s': %s", name, result)
                self._servers[name] = ProviderConnection(name=name, error=str(result))
            else:
                self._servers[name] = result

        self._initialized = True

    async def _connect(self, name: str, server: MCPServerConfig) -> ProviderConnection:
        with _tracer.start_as_current_span("mcp.connect") as span:
            span.set_attribute(ATTR_MCP_SERVER, name)
            client = MCPClient(name, server, elicitation_handler=self._relay_elicitation(name))
            await client.connect()
            try:
                tools = await client.list_tools()
            except Exception as exc:
                await client.close()
                raise ProviderHandshakeError(name, str(exc)) from exc
            span.set_attribute(ATTR_MCP_TOOL_COUNT, len(tools))
            logger.debug("Connected to MCP server '%s' (%d tools)", name, len(tools))
            return ProviderConnection(name=name, connected=True, tools=tools, client=client)

    def _relay_elicitation(self, server_name: str) -> ElicitationHandler:
        # Resolved per request so the handler can be installed after initialize().
        async def relay(request: ElicitationRequest) -> ElicitationResponse:
            handler = self._elicitation_handler
            if handler is None:
                raise ElicitationNotConfiguredError(server_name)
            return await handler(request)

        return relay

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def list_tools(self) -> list[ToolDescriptor]:
        """Return the tools of all connected servers, named ``server_tool``."""
        descriptors: list[ToolDescriptor] = []
        for server_name, connection in self._servers.items():
            if not connection.connected:
                continue
            for tool in connection.tools:
                descriptors.append(
                    ToolDescriptor(
                        name=f"{server_name}_{tool.name}",
                        description=tool.description or f"Tool from MCP server: {server_name}",
                        parameters=tool.input_schema or {"type": "object", "properties": {}},
                        executor=self._make_executor(server_name, tool.name),
                    )
                )
        return descriptors

    def _make_executor(self, server_name: str, tool_name: str) -> ToolExecutor:
        async def execute(arguments: dict[str, Any]) -> dict[str, Any]:
            return await self.invoke(server_name, tool_name, arguments)

        return execute

    async def invoke(self, server_name: str, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Call *tool_name* on *server_name*.

        Remote failures are returned as ``{"success": False, "error": ...}``
        so the model can see them.

        Raises:
            ProviderNotConnectedError: If the server is unknown or disconnected.
        """
        connection = self._servers.get(server_name)
        if connection is None or not connection.connected or connection.client is None:
            raise ProviderNotConnectedError(server_name)

        base: dict[str, Any] = {"server": server_name, "tool": tool_name}
        with _tracer.start_as_current_span("mcp.call_tool") as span:
            span.set_attribute(ATTR_MCP_SERVER, server_name)
            span.set_attribute(ATTR_TOOL_NAME, tool_name)
            try:
                text = await connection.client.call_tool(tool_name, arguments)
            except ProtocolError as exc:
                logger.warning("Error executing MCP tool %s:%s: %s", server_name, tool_name, exc)
                return {**base, "success": False, "error": str(exc)}
        return {**base, "success": True, "content": text or "Tool executed successfully"}

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def server_info(self) -> list[dict[str, Any]]:
        """Summaries of every configured server, connected or not."""
        return [
            {
                "name": conn.name,
                "connected": conn.connected,
                "tool_count": len(conn.tools),
                "tools": [t.name for t in conn.tools],
                "error": conn.error,
            }
            for conn in self._servers.values()
        ]

    @property
    def connected_count(self) -> int:
        return sum(1 for conn in self._servers.values() if conn.connected)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        """Disconnect every server concurrently and forget all state."""
        connections = [
            conn for conn in self._servers.values() if conn.connected and conn.client is not None
        ]
        results = await asyncio.gather(
            *[conn.client.close() for conn in connections if conn.client is not None],
            return_exceptions=True,
        )
        for conn, result in zip(connections, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Error disconnecting from server %s: %s", conn.name, result)

        self._servers.clear()
        self._initialized = False
