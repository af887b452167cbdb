"""MCPClient — one connection to an MCP server.

Implements the ``initialize`` handshake, tool discovery (``tools/list``) and
execution (``tools/call``) over an :class:`MCPTransport`, and answers the
requests a server may send back while a call is in flight (``elicitation/create``,
``ping``).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError

from mcpchat import __version__
from mcpchat.errors import (
    ElicitationNotConfiguredError,
    ProviderConnectionError,
    ProviderHandshakeError,
    RemoteToolError,
)
from mcpchat.protocols.mcp.models import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    ElicitationRequest,
    ElicitationResponse,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)
from mcpchat.protocols.mcp.transport import MCPTransport, StdioTransport

if TYPE_CHECKING:
    from mcpchat.protocols.mcp.config import MCPServerConfig

logger = logging.getLogger(__name__)

ElicitationHandler = Callable[[ElicitationRequest], Awaitable[ElicitationResponse]]


class MCPClient:
    """Async context manager that connects to a single MCP server.

    *elicitation_handler* is called whenever the server asks for user input
    while a tool runs.  Without one, such requests are answered with a
    JSON-RPC error.

    Usage::

        config = MCPServerConfig(command="npx", args=["@mcp/filesystem"])
        async with MCPClient("fs", config) as client:
            tools = await client.list_tools()
            text = await client.call_tool("read_file", {"path": "/tmp/x"})
    """

    def __init__(
        self,
        name: str,
        config: MCPServerConfig,
        *,
        elicitation_handler: ElicitationHandler | None = None,
    ) -> None:
        self.name = name
        self._config = config
        self._elicitation_handler = elicitation_handler
        self._transport: MCPTransport | None = None
        self._next_id = 1
        self._lock = asyncio.Lock()
        self.server_info: dict[str, Any] = {}

    async def __aenter__(self) -> MCPClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        return self._transport is not None

    async def connect(self) -> None:
        """Start the transport and perform the initialize handshake.

        Raises:
            ProviderHandshakeError: If the server cannot be started or
                rejects the handshake.  The transport is closed again.
        """
        self._transport = self._create_transport()
        try:
            await self._transport.connect()
            await self._handshake()
        except Exception as exc:
            await self.close()
            raise ProviderHandshakeError(self.name, str(exc) or exc.__class__.__name__) from exc

    async def close(self) -> None:
        """Close the underlying transport."""
        if self._transport is not None:
            transport, self._transport = self._transport, None
            await transport.close()

    async def list_tools(self) -> list[MCPToolDef]:
        """Send ``tools/list`` and return the server's tool definitions."""
        response = await self._send_request("tools/list")
        if response.error is not None:
            raise ProviderConnectionError(f"tools/list failed: {response.error.message}")
        raw_tools = (
            cast("list[dict[str, Any]]", response.result.get("tools", []))
            if response.result
            else []
        )
        return [MCPToolDef.model_validate(raw) for raw in raw_tools]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """Send ``tools/call`` and return the joined text content.

        Raises:
            RemoteToolError: If the server answers with an error or a result
                flagged ``isError``.
            ProviderConnectionError: If the transport fails.
        """
        response = await self._send_request(
            "tools/call",
            params={"name": name, "arguments": arguments},
        )
        if response.error is not None:
            raise RemoteToolError(name, response.error.message)

        text = self._extract_content(name, response)
        if response.result and response.result.get("isError"):
            raise RemoteToolError(name, text)
        return text

    def _create_transport(self) -> MCPTransport:
        return StdioTransport(
            command=self._config.command,
            args=self._config.args,
            env=dict(self._config.env) or None,
        )

    async def _handshake(self) -> None:
        """Perform the MCP initialize handshake."""
        response = await self._send_request(
            "initialize",
            params={
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"elicitation": {}},
                "clientInfo": {"name": "mcp-chat", "version": __version__},
            },
        )
        if response.error is not None:
            raise ProviderConnectionError(response.error.message)
        self.server_info = dict(response.result or {})
        await self._send_notification("notifications/initialized")

    async def _send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        transport = self._require_transport()
        await transport.send(JsonRpcNotification(method=method, params=params or {}).model_dump())

    async def _send_request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> JsonRpcResponse:
        """Send a JSON-RPC request and wait for its response.

        Server-initiated requests that arrive in the meantime are answered
        inline; notifications are ignored.
        """
        async with self._lock:
            transport = self._require_transport()

            request_id = self._next_id
            self._next_id += 1

            request = JsonRpcRequest(method=method, id=request_id, params=params or {})
            try:
                await transport.send(request.model_dump())
                while True:
                    raw = await transport.receive()
                    if "method" in raw:
                        if "id" in raw:
                            await self._answer_server_request(transport, raw)
                        else:
                            logger.debug("%s: ignoring notification %s", self.name, raw["method"])
                        continue
                    response = JsonRpcResponse.model_validate(raw)
                    if response.id == request_id:
                        return response
                    logger.debug("%s: dropping response for unknown id %r", self.name, response.id)
            except (OSError, RuntimeError, ValueError) as exc:
                raise ProviderConnectionError(f"{self.name}: {exc}") from exc

    async def _answer_server_request(self, transport: MCPTransport, raw: dict[str, Any]) -> None:
        """Handle one request sent by the server and write the response."""
        method = raw["method"]
        request_id = raw["id"]
        params: dict[str, Any] = raw.get("params") or {}

        if method == "ping":
            reply = JsonRpcResponse(id=request_id, result={})
        elif method == "elicitation/create":
            reply = await self._elicit(request_id, params)
        else:
            reply = JsonRpcResponse(
                id=request_id,
                error=JsonRpcError(code=METHOD_NOT_FOUND, message=f"Method not found: {method}"),
            )
        await transport.send(reply.model_dump(exclude_none=True))

    async def _elicit(self, request_id: int | str, params: dict[str, Any]) -> JsonRpcResponse:
        if self._elicitation_handler is None:
            error = ElicitationNotConfiguredError(self.name)
            logger.error("%s", error)
            return JsonRpcResponse(
                id=request_id,
                error=JsonRpcError(code=INTERNAL_ERROR, message=str(error)),
            )
        try:
            request = ElicitationRequest.model_validate(params)
        except ValidationError as exc:
            return JsonRpcResponse(
                id=request_id,
                error=JsonRpcError(code=-32602, message=f"Invalid elicitation request: {exc}"),
            )
        try:
            answer = await self._elicitation_handler(request)
            if not isinstance(answer, ElicitationResponse):
                msg = f"Elicitation handler returned {type(answer).__name__}, not ElicitationResponse"
                raise TypeError(msg)
        except ElicitationNotConfiguredError as exc:
            logger.error("%s", exc)
            return JsonRpcResponse(
                id=request_id,
                error=JsonRpcError(code=INTERNAL_ERROR, message=str(exc)),
            )
        except Exception as exc:
            logger.exception("%s: elicitation handler failed", self.name)
            return JsonRpcResponse(
                id=request_id,
                error=JsonRpcError(code=INTERNAL_ERROR, message=str(exc) or exc.__class__.__name__),
            )
        return JsonRpcResponse(id=request_id, result=answer.to_result())

    def _require_transport(self) -> MCPTransport:
        if self._transport is None:
            msg = "Client not connected"
            raise ProviderConnectionError(msg)
        return self._transport

    @staticmethod
    def _extract_content(tool_name: str, response: JsonRpcResponse) -> str:
        """Join the text parts of a ``tools/call`` result.

        Raises:
            RemoteToolError: If ``content`` is not a list of objects.
        """
        if response.result is None:
            return ""
        content = response.result.get("content") or []
        if not isinstance(content, list):
            raise RemoteToolError(tool_name, f"Malformed result: content is {type(content).__name__}")
        parts: list[str] = []
        for item in cast("list[Any]", content):
            if not isinstance(item, dict):
                raise RemoteToolError(tool_name, f"Malformed result: content item is {type(item).__name__}")
            item = cast("dict[str, Any]", item)
            if item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "\n".join(parts)
