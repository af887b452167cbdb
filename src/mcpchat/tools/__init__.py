"""Tool registry and built-in tools."""

from mcpchat.tools.registry import ToolDescriptor, ToolExecutor, ToolRegistry

__all__ = [
    "ToolDescriptor",
    "ToolExecutor",
    "ToolRegistry",
]
