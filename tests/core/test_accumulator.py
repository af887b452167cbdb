"""Tests for DeltaAccumulator."""

from __future__ import annotations

import pytest

from mcpchat.core.accumulator import DeltaAccumulator, StreamDelta, ToolCallDelta
from mcpchat.errors import StreamFormatError


class TestTextOnly:
    def test_feed_returns_text(self) -> None:
        acc = DeltaAccumulator()
        assert acc.feed(StreamDelta(content="Hel")) == "Hel"
        assert acc.feed(StreamDelta(content="lo")) == "lo"
        assert acc.text == "Hello"
        assert acc.finish() == []

    def test_empty_fragment_yields_nothing(self) -> None:
        acc = DeltaAccumulator()
        assert acc.feed(StreamDelta()) is None
        assert acc.feed(StreamDelta(content="")) is None
        assert acc.text == ""

    def test_finish_reason_recorded(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(content="hi"))
        acc.feed(StreamDelta(finish_reason="stop"))
        assert acc.finish_reason == "stop"


class TestToolCalls:
    def test_fragments_concatenate(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="call_a", name="calc")]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, name="ulator", arguments='{"a":')]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, arguments=" 25}")]))

        calls = acc.finish()
        assert len(calls) == 1
        assert calls[0].id == "call_a"
        assert calls[0].function.name == "calculator"
        assert calls[0].function.arguments == '{"a": 25}'

    def test_interleaved_indices_keep_order(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=1, id="b", name="second")]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="a", name="first")]))
        acc.feed(
            StreamDelta(
                tool_calls=[
                    ToolCallDelta(index=0, arguments="{}"),
                    ToolCallDelta(index=1, arguments='{"x": 1}'),
                ]
            )
        )

        calls = acc.finish()
        assert [c.id for c in calls] == ["a", "b"]
        assert calls[1].function.arguments == '{"x": 1}'

    def test_later_id_overwrites(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="first", name="t")]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="second")]))
        assert acc.finish()[0].id == "second"

    def test_missing_id_generated(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, name="t", arguments="{}")]))
        call = acc.finish()[0]
        assert call.id.startswith("call_")

    def test_indices_need_not_start_at_zero(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=3, id="x", name="t")]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=4, id="y", name="u")]))
        assert [c.id for c in acc.finish()] == ["x", "y"]

    def test_hole_in_indices_raises(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="a", name="t")]))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=2, id="c", name="t")]))
        with pytest.raises(StreamFormatError, match="skipped index 1"):
            acc.finish()

    def test_missing_name_raises(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="a", arguments="{}")]))
        with pytest.raises(StreamFormatError, match="no function name"):
            acc.finish()

    def test_text_and_tool_calls_together(self) -> None:
        acc = DeltaAccumulator()
        acc.feed(StreamDelta(content="Let me check. "))
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="a", name="get_time")]))
        acc.feed(StreamDelta(finish_reason="tool_calls"))

        assert acc.text == "Let me check. "
        assert acc.finish_reason == "tool_calls"
        assert acc.finish()[0].function.arguments == ""


class TestFragmentEquivalence:
    @pytest.mark.parametrize("size", [1, 2, 5, 100])
    def test_split_arguments_match_whole(self, size: int) -> None:
        arguments = '{"operation": "add", "a": 25, "b": 17}'
        pieces = [arguments[i : i + size] for i in range(0, len(arguments), size)]

        acc = DeltaAccumulator()
        acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, id="call_1", name="calculator")]))
        for piece in pieces:
            acc.feed(StreamDelta(tool_calls=[ToolCallDelta(index=0, arguments=piece)]))

        whole = DeltaAccumulator()
        whole.feed(
            StreamDelta(
                tool_calls=[
                    ToolCallDelta(index=0, id="call_1", name="calculator", arguments=arguments)
                ]
            )
        )
        assert acc.finish() == whole.finish()
