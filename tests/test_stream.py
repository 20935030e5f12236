import json

import httpx
import pytest

from clother_proxy.translator.stream import StreamState, StreamTranslator, translate_stream

from tests.helpers import finish_chunk, parse_events, sse_body, text_chunk


def feed_all(translator, body: bytes):
    frames = []
    for line in body.decode().split("\n"):
        frames.extend(translator.feed_line(line))
    return parse_events("".join(frames))


def test_hello_world_sequence():
    translator = StreamTranslator(model="openai/gpt-4o", message_id="msg_fixed")
    events = feed_all(translator, sse_body(text_chunk("Hello"), text_chunk(" world"), finish_chunk("stop"), "[DONE]"))

    assert [name for name, _ in events] == [
        "message_start",
        "content_block_delta",
        "content_block_delta",
        "message_delta",
        "message_stop",
    ]
    assert events[0][1] == {
        "type": "message_start",
        "message": {
            "id": "msg_fixed",
            "type": "message",
            "role": "assistant",
            "model": "openai/gpt-4o",
            "content": [],
        },
    }
    assert events[1][1] == {
        "type": "content_block_delta",
        "index": 0,
        "delta": {"type": "text_delta", "text": "Hello"},
    }
    assert events[2][1]["delta"]["text"] == " world"
    assert events[3][1] == {"type": "message_delta", "delta": {"stop_reason": "end_turn"}}
    assert events[4][1] == {"type": "message_stop"}
    assert translator.state is StreamState.CLOSED


def test_state_transitions():
    translator = StreamTranslator(model="m")
    assert translator.state is StreamState.AWAITING_FIRST_FRAME

    translator.feed_line("data: " + json.dumps(text_chunk("x")))
    assert translator.state is StreamState.STREAMING

    translator.feed_line("data: [DONE]")
    assert translator.closed
    assert translator.feed_line("data: " + json.dumps(text_chunk("late"))) == []


def test_malformed_frame_is_skipped():
    translator = StreamTranslator(model="m")
    events = feed_all(translator, sse_body(text_chunk("a"), "{broken", text_chunk("b"), "[DONE]"))

    texts = [data["delta"]["text"] for name, data in events if name == "content_block_delta"]
    assert texts == ["a", "b"]
    assert events[-1][0] == "message_stop"


def test_malformed_first_frame_does_not_start_message():
    translator = StreamTranslator(model="m")

    assert translator.feed_line("data: nope") == []
    assert translator.state is StreamState.AWAITING_FIRST_FRAME


def test_message_start_emitted_once_and_first():
    translator = StreamTranslator(model="m")
    events = feed_all(translator, sse_body(
        {"id": "gen-1", "choices": [{"index": 0, "delta": {"role": "assistant", "content": ""}}]},
        text_chunk("x"),
        "[DONE]",
    ))

    names = [name for name, _ in events]
    assert names == ["message_start", "content_block_delta", "message_stop"]


def test_non_data_lines_ignored():
    translator = StreamTranslator(model="m")

    assert translator.feed_line(": OPENROUTER PROCESSING") == []
    assert translator.feed_line("event: ping") == []
    assert translator.state is StreamState.AWAITING_FIRST_FRAME


@pytest.mark.parametrize("reason, expected", [("length", "max_tokens"), ("tool_calls", "tool_use"), ("content_filter", "end_turn")])
def test_finish_reason_mapping_in_stream(reason, expected):
    translator = StreamTranslator(model="m")
    events = feed_all(translator, sse_body(finish_chunk(reason)))

    assert events[-1] == ("message_delta", {"type": "message_delta", "delta": {"stop_reason": expected}})


def test_message_ids_are_fresh():
    ids = {StreamTranslator(model="m").message_id for _ in range(50)}

    assert len(ids) == 50
    assert all(i.startswith("msg_") for i in ids)


async def _collect(response, translator):
    return [frame async for frame in translate_stream(response, translator)]


@pytest.mark.asyncio
async def test_translate_stream_stops_at_done():
    body = sse_body(text_chunk("a"), "[DONE]", text_chunk("after done"))
    response = httpx.Response(200, content=body)

    frames = await _collect(response, StreamTranslator(model="m"))

    events = parse_events("".join(frames))
    assert [name for name, _ in events] == ["message_start", "content_block_delta", "message_stop"]
    assert response.is_closed


@pytest.mark.asyncio
async def test_translate_stream_ends_quietly_on_transport_error():
    async def body():
        yield sse_body(text_chunk("partial"))
        raise httpx.ReadError("connection reset")

    response = httpx.Response(200, content=body())
    translator = StreamTranslator(model="m")

    frames = await _collect(response, translator)

    events = parse_events("".join(frames))
    assert [name for name, _ in events] == ["message_start", "content_block_delta"]
    assert translator.closed
    assert response.is_closed


@pytest.mark.asyncio
async def test_translate_stream_ends_when_body_ends_without_done():
    response = httpx.Response(200, content=sse_body(text_chunk("a"), finish_chunk("stop")))
    translator = StreamTranslator(model="m")

    frames = await _collect(response, translator)

    assert [name for name, _ in parse_events("".join(frames))] == [
        "message_start", "content_block_delta", "message_delta",
    ]
    assert translator.closed
