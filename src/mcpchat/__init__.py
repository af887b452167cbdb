"""mcp-chat — streaming chat with tool calling and MCP tool servers."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpchat.core.assistant import Assistant as Assistant
    from mcpchat.core.config import AssistantConfig as AssistantConfig

_EXPORTS = {
    "Assistant": "mcpchat.core.assistant",
    "AssistantConfig": "mcpchat.core.config",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpchat' has no attribute {name!r}")
