"""ModelClient — streaming chat completions through LiteLLM.

Converts LiteLLM's OpenAI-shaped stream chunks into :class:`StreamDelta`
fragments so the orchestration loop never touches provider objects.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import litellm

from mcpchat.core.accumulator import StreamDelta, ToolCallDelta
from mcpchat.errors import StreamTransportError
from mcpchat.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_PROVIDER,
    ATTR_TOOL_CALLS,
    get_tracer,
    open_span,
)

if TYPE_CHECKING:
    from mcpchat.core.config import AssistantConfig
    from mcpchat.core.messages import Message

_tracer = get_tracer(__name__)


class ModelClient:
    """Async client for streaming responses from the configured model.

    Usage::

        client = ModelClient(config)
        async for delta in client.stream(messages, tools):
            ...
    """

    def __init__(self, config: AssistantConfig) -> None:
        self.config = config

    @property
    def provider(self) -> str:
        """Provider prefix of the LiteLLM model string."""
        if "/" in self.config.model:
            return self.config.model.split("/", 1)[0]
        return "openai"

    async def stream(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[StreamDelta]:
        """Send *messages* as a streaming request and yield its fragments.

        Single attempt: any failure while opening or reading the stream is
        raised as :class:`StreamTransportError`.
        """
        call_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_provider() for m in messages],
            "stream": True,
            "num_retries": 0,
            **kwargs,
        }
        if self.config.api_key:
            call_kwargs["api_key"] = self.config.api_key
        if self.config.base_url:
            call_kwargs["api_base"] = self.config.base_url
        if tools:
            call_kwargs["tools"] = tools

        attributes = {ATTR_MODEL: self.config.model, ATTR_PROVIDER: self.provider}
        with open_span(_tracer, "model.stream", attributes) as span:
            indices: set[int] = set()

            try:
                response = await litellm.acompletion(**call_kwargs)  # pyright: ignore[reportUnknownMemberType]
                async for chunk in response:
                    delta = _parse_chunk(chunk)
                    if delta is None:
                        continue
                    indices.update(tc.index for tc in delta.tool_calls)
                    if delta.finish_reason:
                        span.set_attribute(ATTR_FINISH_REASON, delta.finish_reason)
                    yield delta
                span.set_attribute(ATTR_TOOL_CALLS, len(indices))
            except StreamTransportError:
                raise
            except Exception as exc:
                raise StreamTransportError(str(exc) or exc.__class__.__name__) from exc


def _parse_chunk(chunk: Any) -> StreamDelta | None:
    """Convert one LiteLLM stream chunk to a :class:`StreamDelta`.

    Chunks without choices (usage-only trailers) are skipped.
    """
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    choice = choices[0]
    delta = getattr(choice, "delta", None)
    finish_reason = getattr(choice, "finish_reason", None)

    if delta is None:
        return StreamDelta(finish_reason=finish_reason)

    fragments: list[ToolCallDelta] = []
    for tc in getattr(delta, "tool_calls", None) or []:
        function = getattr(tc, "function", None)
        index = getattr(tc, "index", None)
        if index is None:
            raise StreamTransportError("Tool call fragment without an index")
        fragments.append(
            ToolCallDelta(
                index=index,
                id=getattr(tc, "id", None),
                name=getattr(function, "name", None) if function is not None else None,
                arguments=getattr(function, "arguments", None) if function is not None else None,
            )
        )

    return StreamDelta(
        content=getattr(delta, "content", None),
        tool_calls=fragments,
        finish_reason=finish_reason,
    )
