"""Conversation messages and the append-only message store.

Messages use the OpenAI chat-completions shape directly (plain string
content, ``tool_calls`` on assistant turns, ``tool_call_id`` + ``name`` on
tool results) since that is what LiteLLM accepts for every provider.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel, model_validator

# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------


class FunctionCall(BaseModel):
    """Name and JSON-encoded arguments of a function tool call."""

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A complete tool invocation emitted by an assistant turn."""

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall

    @property
    def name(self) -> str:
        return self.function.name


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single conversation message.

    Roles:
    - system: instructions, only ever the first message
    - user: human input
    - assistant: model output (``tool_calls`` only when tools were invoked)
    - tool: a tool result (must carry ``tool_call_id`` and ``name``)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_call_id: str | None = None
    name: str | None = None
    tool_calls: list[ToolCall] | None = None

    @model_validator(mode="after")
    def _check_role_fields(self) -> Message:
        if self.role == "tool" and (not self.tool_call_id or not self.name):
            msg = "tool messages require tool_call_id and name"
            raise ValueError(msg)
        if self.tool_calls is not None and not self.tool_calls:
            self.tool_calls = None
        if self.tool_calls is not None and self.role != "assistant":
            msg = "only assistant messages may carry tool_calls"
            raise ValueError(msg)
        return self

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", content=text)

    @classmethod
    def assistant(cls, text: str = "", tool_calls: list[ToolCall] | None = None) -> Message:
        return cls(role="assistant", content=text, tool_calls=tool_calls)

    @classmethod
    def tool(cls, tool_call_id: str, name: str, content: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id, name=name)

    def to_provider(self) -> dict[str, Any]:
        """Return the chat-completions dict for this message."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Message store
# ---------------------------------------------------------------------------


class MessageStore:
    """Ordered conversation history.

    Append-only, except for :meth:`reset`.  At most one system message is
    allowed and it must be the first entry.
    """

    def __init__(self, system: str | None = None) -> None:
        self._messages: list[Message] = []
        if system:
            self.append(Message.system(system))

    def append(self, message: Message) -> None:
        """Append *message*; a system message is only accepted first."""
        if message.role == "system" and self._messages:
            msg = "a system message may only be the first message"
            raise ValueError(msg)
        self._messages.append(message)

    def snapshot(self) -> list[Message]:
        """Return an ordered deep copy of the history."""
        return [m.model_copy(deep=True) for m in self._messages]

    def reset(self) -> None:
        """Drop everything but the leading system message, if any."""
        del self._messages[self._keep :]

    @property
    def system_message(self) -> Message | None:
        if self._messages and self._messages[0].role == "system":
            return self._messages[0]
        return None

    @property
    def _keep(self) -> int:
        return 1 if self.system_message is not None else 0

    def to_provider(self) -> list[dict[str, Any]]:
        """Convert the whole history to chat-completions dicts."""
        return [m.to_provider() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))
