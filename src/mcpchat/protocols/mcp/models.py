"""MCP models — JSON-RPC 2.0 envelopes, tool definitions and elicitation.

Implements the subset of the Model Context Protocol used by the chat client:
``initialize``, ``tools/list``, ``tools/call`` and the server-initiated
``elicitation/create`` request.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_VERSION = "2025-06-18"

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    jsonrpc: str = "2.0"
    method: str
    id: int | str = 1
    params: dict[str, Any] = {}


class JsonRpcNotification(BaseModel):
    """A JSON-RPC 2.0 notification (a request without ``id``)."""

    jsonrpc: str = "2.0"
    method: str
    params: dict[str, Any] = {}


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None


METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class MCPToolDef(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")


# ---------------------------------------------------------------------------
# Elicitation
# ---------------------------------------------------------------------------


class ElicitationField(BaseModel):
    """Schema of a single requested field (primitive types only)."""

    model_config = ConfigDict(extra="allow")

    type: str = "string"
    title: str | None = None
    description: str | None = None


class ElicitationSchema(BaseModel):
    """The flat object schema an elicitation request asks the user to fill."""

    type: Literal["object"] = "object"
    properties: dict[str, ElicitationField] = {}
    required: list[str] = []


class ElicitationRequest(BaseModel):
    """Parameters of an ``elicitation/create`` request."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    requested_schema: ElicitationSchema = Field(
        default_factory=ElicitationSchema, alias="requestedSchema"
    )


class ElicitationResponse(BaseModel):
    """The user's answer to an elicitation request."""

    action: Literal["accept", "decline", "cancel"]
    content: dict[str, str | int | float | bool] | None = None

    def to_result(self) -> dict[str, Any]:
        """Return the JSON-RPC ``result`` payload."""
        return self.model_dump(exclude_none=True)
