"""ToolRegistry — maps tool names to executors and dispatches tool calls."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, Field

from mcpchat.errors import MalformedArgumentsError, ToolExecutionFailure, UnknownToolError
from mcpchat.utils.telemetry import ATTR_TOOL_NAME, get_tracer

_tracer = get_tracer(__name__)

logger = logging.getLogger(__name__)

ToolExecutor = Callable[[dict[str, Any]], Any]
"""Takes the decoded argument mapping; may return a value or an awaitable."""


class ToolDescriptor(BaseModel):
    """A tool the model can call.

    ``executor`` may be a plain function or a coroutine function.  Names
    coming from MCP servers are already namespaced (``server_tool``).
    """

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    executor: ToolExecutor = Field(exclude=True)

    def to_schema(self) -> dict[str, Any]:
        """Return the OpenAI-compatible function schema for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolRegistry:
    """Name-to-descriptor map used by the orchestration loop.

    Usage::

        registry = ToolRegistry()
        registry.register(calculator_tool)
        schemas = registry.schemas()            # advertised to the model
        result = await registry.execute("calculator", '{"operation": "add", "a": 1, "b": 2}')
    """

    def __init__(self, tools: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self.register_all(tools)

    def register(self, descriptor: ToolDescriptor) -> None:
        """Add *descriptor*, replacing any tool with the same name."""
        if descriptor.name in self._tools:
            logger.warning("Replacing already registered tool %s", descriptor.name)
        self._tools[descriptor.name] = descriptor

    def register_all(self, descriptors: Iterable[ToolDescriptor]) -> None:
        for descriptor in descriptors:
            self.register(descriptor)

    def lookup(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def list(self) -> list[ToolDescriptor]:
        """Return every registered tool, in registration order."""
        return list(self._tools.values())

    def schemas(self) -> list[dict[str, Any]]:
        """Return the function schemas of every registered tool."""
        return [tool.to_schema() for tool in self._tools.values()]

    async def execute(self, name: str, arguments_json: str) -> Any:
        """Decode *arguments_json*, find the tool and run its executor.

        Raises:
            MalformedArgumentsError: If the arguments are not a JSON object.
            UnknownToolError: If no tool called *name* is registered.
            ToolExecutionFailure: If the executor raises; the original
                exception is chained as ``__cause__``.
        """
        arguments = _decode_arguments(name, arguments_json)

        descriptor = self._tools.get(name)
        if descriptor is None:
            raise UnknownToolError(name)

        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            try:
                result = descriptor.executor(arguments)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                raise ToolExecutionFailure(name, str(exc)) from exc
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def _decode_arguments(name: str, arguments_json: str) -> dict[str, Any]:
    try:
        arguments = json.loads(arguments_json)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedArgumentsError(name, str(exc)) from exc
    if not isinstance(arguments, dict):
        raise MalformedArgumentsError(name, "expected a JSON object")
    return arguments  # type: ignore[return-value]
