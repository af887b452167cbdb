"""Tests for MCP JSON-RPC and elicitation models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcpchat.protocols.mcp.models import (
    ElicitationRequest,
    ElicitationResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)


class TestJsonRpc:
    def test_request_dump(self) -> None:
        req = JsonRpcRequest(method="tools/list", id=7)
        assert req.model_dump() == {"jsonrpc": "2.0", "method": "tools/list", "id": 7, "params": {}}

    def test_notification_has_no_id(self) -> None:
        note = JsonRpcNotification(method="notifications/initialized")
        assert "id" not in note.model_dump()

    def test_response_with_error(self) -> None:
        resp = JsonRpcResponse.model_validate(
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}}
        )
        assert resp.error is not None
        assert resp.error.code == -32601
        assert resp.result is None

    def test_response_null_id(self) -> None:
        resp = JsonRpcResponse.model_validate(
            {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "parse"}}
        )
        assert resp.id is None


class TestMCPToolDef:
    def test_alias(self) -> None:
        tool = MCPToolDef.model_validate(
            {"name": "read", "inputSchema": {"type": "object", "properties": {}}}
        )
        assert tool.input_schema == {"type": "object", "properties": {}}
        assert tool.description == ""

    def test_populate_by_name(self) -> None:
        tool = MCPToolDef(name="read", input_schema={"type": "object"})
        assert tool.input_schema["type"] == "object"


class TestElicitation:
    def test_request_parsing(self) -> None:
        req = ElicitationRequest.model_validate(
            {
                "message": "Who are you?",
                "requestedSchema": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "title": "Name"},
                        "age": {"type": "integer", "minimum": 0},
                    },
                    "required": ["name"],
                },
            }
        )
        assert req.message == "Who are you?"
        assert set(req.requested_schema.properties) == {"name", "age"}
        assert req.requested_schema.properties["name"].title == "Name"
        assert req.requested_schema.required == ["name"]

    def test_request_without_schema(self) -> None:
        req = ElicitationRequest.model_validate({"message": "Continue?"})
        assert req.requested_schema.properties == {}

    def test_request_requires_message(self) -> None:
        with pytest.raises(ValidationError):
            ElicitationRequest.model_validate({"requestedSchema": {}})

    def test_accept_result(self) -> None:
        resp = ElicitationResponse(action="accept", content={"name": "Ada", "age": 36})
        assert resp.to_result() == {"action": "accept", "content": {"name": "Ada", "age": 36}}

    def test_decline_result_omits_content(self) -> None:
        assert ElicitationResponse(action="decline").to_result() == {"action": "decline"}

    def test_invalid_action(self) -> None:
        with pytest.raises(ValidationError):
            ElicitationResponse(action="maybe")  # type: ignore[arg-type]
