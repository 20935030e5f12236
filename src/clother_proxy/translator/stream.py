"""
Streaming translation from OpenAI chat completion chunks to Anthropic events.

Upstream sends ``data: {...}`` lines terminated by ``data: [DONE]``. Each line
is turned into zero or more Anthropic SSE frames:
message_start, content_block_delta*, message_delta, message_stop.
"""

import json
import uuid
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
import structlog

from .anthropic_to_openai import map_stop_reason

logger = structlog.get_logger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamState(Enum):
    """Lifecycle of a single streamed response."""
    AWAITING_FIRST_FRAME = "awaiting_first_frame"
    STREAMING = "streaming"
    CLOSED = "closed"


def encode_event(event_type: str, payload: Dict[str, Any]) -> str:
    """Encode one Anthropic SSE frame."""
    return f"event: {event_type}\ndata: {json.dumps(payload)}\n\n"


def new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex[:24]}"


class StreamTranslator:
    """Translates one upstream stream; create a new instance per response."""

    # Only a single text block is ever produced.
    TEXT_INDEX = 0

    def __init__(self, model: str, message_id: Optional[str] = None):
        self.model = model
        self.message_id = message_id or new_message_id()
        self.state = StreamState.AWAITING_FIRST_FRAME

    @property
    def closed(self) -> bool:
        return self.state is StreamState.CLOSED

    def feed_line(self, line: str) -> List[str]:
        """
        Translate one upstream line.

        Args:
            line: Raw line from the upstream body, without the trailing newline

        Returns:
            Encoded Anthropic frames to send, in order
        """
        if self.closed or not line.startswith(DATA_PREFIX):
            return []

        data = line[len(DATA_PREFIX):]
        if data.strip() == DONE_SENTINEL:
            self.state = StreamState.CLOSED
            return [encode_event("message_stop", {"type": "message_stop"})]

        try:
            chunk = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Skipping unparsable stream frame", frame=data[:200])
            return []
        if not isinstance(chunk, dict):
            logger.debug("Skipping non-object stream frame", frame=data[:200])
            return []

        frames: List[str] = []
        if self.state is StreamState.AWAITING_FIRST_FRAME:
            frames.append(self._message_start())
            self.state = StreamState.STREAMING

        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return frames
        choice = choices[0]

        delta = choice.get("delta")
        if isinstance(delta, dict):
            text = delta.get("content")
            if isinstance(text, str) and text:
                frames.append(encode_event("content_block_delta", {
                    "type": "content_block_delta",
                    "index": self.TEXT_INDEX,
                    "delta": {"type": "text_delta", "text": text},
                }))

        finish_reason = choice.get("finish_reason")
        if isinstance(finish_reason, str) and finish_reason:
            frames.append(encode_event("message_delta", {
                "type": "message_delta",
                "delta": {"stop_reason": map_stop_reason(finish_reason)},
            }))

        return frames

    def close(self) -> None:
        """Mark the stream finished without emitting anything."""
        self.state = StreamState.CLOSED

    def _message_start(self) -> str:
        return encode_event("message_start", {
            "type": "message_start",
            "message": {
                "id": self.message_id,
                "type": "message",
                "role": "assistant",
                "model": self.model,
                "content": [],
            },
        })


async def iter_data_lines(response: httpx.Response) -> AsyncIterator[str]:
    """Yield upstream lines one at a time, skipping blank keep-alive lines."""
    async for line in response.aiter_lines():
        line = line.rstrip("\r")
        if line:
            yield line


async def translate_stream(
    response: httpx.Response,
    translator: StreamTranslator,
) -> AsyncIterator[str]:
    """
    Drive a StreamTranslator over an open upstream response.

    Stops at ``[DONE]``, at end of body, or when the upstream connection
    fails. The upstream response is always closed on exit, including when the
    caller disconnects and the generator is cancelled.
    """
    try:
        async for line in iter_data_lines(response):
            for frame in translator.feed_line(line):
                yield frame
            if translator.closed:
                break
    except httpx.HTTPError as e:
        logger.warning(
            "Upstream stream interrupted",
            message_id=translator.message_id,
            error=str(e),
        )
    finally:
        translator.close()
        await response.aclose()
