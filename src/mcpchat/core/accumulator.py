"""DeltaAccumulator — rebuilds text and tool calls from a streamed response.

A streamed chat completion arrives as a sequence of :class:`StreamDelta`
fragments.  Text is forwarded as soon as it arrives; tool calls are spread
over many fragments, each addressed by a positional ``index``, and only
become usable once the stream has ended.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel

from mcpchat.core.messages import FunctionCall, ToolCall
from mcpchat.errors import StreamFormatError

# ---------------------------------------------------------------------------
# Stream fragments
# ---------------------------------------------------------------------------


class ToolCallDelta(BaseModel):
    """A slice of one tool call, addressed by its stream index."""

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str | None = None


class StreamDelta(BaseModel):
    """One fragment of a streamed model response."""

    content: str | None = None
    tool_calls: list[ToolCallDelta] = []
    finish_reason: str | None = None


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


class _ToolCallBuilder:
    __slots__ = ("arguments", "id", "name")

    def __init__(self) -> None:
        self.id = ""
        self.name = ""
        self.arguments = ""

    def build(self) -> ToolCall:
        call_id = self.id or f"call_{uuid4().hex[:12]}"
        return ToolCall(id=call_id, function=FunctionCall(name=self.name, arguments=self.arguments))


class DeltaAccumulator:
    """Assembles one assistant turn from :class:`StreamDelta` fragments.

    Builders are kept in a dict keyed by the stream-supplied index and are
    created on first sight, so indices may arrive in any order and need not
    start at zero.  :meth:`finish` reads them back in ascending index order.

    Usage::

        acc = DeltaAccumulator()
        async for delta in stream:
            if (text := acc.feed(delta)) is not None:
                print(text, end="")
        tool_calls = acc.finish()
    """

    def __init__(self) -> None:
        self._text: list[str] = []
        self._builders: dict[int, _ToolCallBuilder] = {}
        self.finish_reason: str | None = None

    @property
    def text(self) -> str:
        """All text received so far."""
        return "".join(self._text)

    def feed(self, delta: StreamDelta) -> str | None:
        """Consume one fragment and return its text, if it carried any."""
        for fragment in delta.tool_calls:
            builder = self._builders.get(fragment.index)
            if builder is None:
                builder = self._builders[fragment.index] = _ToolCallBuilder()
            if fragment.id:
                builder.id = fragment.id
            if fragment.name:
                builder.name += fragment.name
            if fragment.arguments:
                builder.arguments += fragment.arguments

        if delta.finish_reason:
            self.finish_reason = delta.finish_reason

        if delta.content:
            self._text.append(delta.content)
            return delta.content
        return None

    def finish(self) -> list[ToolCall]:
        """Return the completed tool calls in index order.

        Raises:
            StreamFormatError: If the populated indices have a hole or a
                tool call never received a function name.
        """
        indices = sorted(self._builders)
        if indices and indices[-1] - indices[0] + 1 != len(indices):
            missing = sorted(set(range(indices[0], indices[-1] + 1)) - set(indices))
            msg = f"Tool call stream skipped index {missing[0]}"
            raise StreamFormatError(msg)
        for i in indices:
            if not self._builders[i].name:
                msg = f"Tool call at index {i} has no function name"
                raise StreamFormatError(msg)
        return [self._builders[i].build() for i in indices]
