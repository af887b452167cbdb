"""MCP protocol — Model Context Protocol client and server manager."""

from mcpchat.protocols.mcp.client import ElicitationHandler, MCPClient
from mcpchat.protocols.mcp.config import MCPConfig, MCPServerConfig, load_mcp_config
from mcpchat.protocols.mcp.manager import MCPClientManager, ProviderConnection
from mcpchat.protocols.mcp.models import (
    ElicitationField,
    ElicitationRequest,
    ElicitationResponse,
    ElicitationSchema,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)
from mcpchat.protocols.mcp.transport import MCPTransport, StdioTransport

__all__ = [
    "ElicitationField",
    "ElicitationHandler",
    "ElicitationRequest",
    "ElicitationResponse",
    "ElicitationSchema",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPClient",
    "MCPClientManager",
    "MCPConfig",
    "MCPServerConfig",
    "MCPToolDef",
    "MCPTransport",
    "ProviderConnection",
    "StdioTransport",
    "load_mcp_config",
]
