"""Conversation core — messages, stream accumulation and the orchestration loop."""

from mcpchat.core.accumulator import DeltaAccumulator, StreamDelta, ToolCallDelta
from mcpchat.core.assistant import Assistant
from mcpchat.core.client import ModelClient
from mcpchat.core.config import AssistantConfig, load_config
from mcpchat.core.messages import FunctionCall, Message, MessageStore, ToolCall

__all__ = [
    "Assistant",
    "AssistantConfig",
    "DeltaAccumulator",
    "FunctionCall",
    "Message",
    "MessageStore",
    "ModelClient",
    "StreamDelta",
    "ToolCall",
    "ToolCallDelta",
    "load_config",
]
