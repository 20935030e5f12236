"""
Helpers for building upstream stream bodies and reading proxy SSE output.
"""

import json
from typing import Any, Dict, List, Tuple


def sse_body(*frames: Any) -> bytes:
    """Encode upstream OpenAI stream frames; strings are sent verbatim."""
    lines = []
    for frame in frames:
        payload = frame if isinstance(frame, str) else json.dumps(frame)
        lines.append(f"data: {payload}\n\n")
    return "".join(lines).encode()


def text_chunk(text: str) -> Dict[str, Any]:
    return {"id": "gen-1", "choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}]}


def finish_chunk(reason: str) -> Dict[str, Any]:
    return {"id": "gen-1", "choices": [{"index": 0, "delta": {}, "finish_reason": reason}]}


def parse_events(body: str) -> List[Tuple[str, Dict[str, Any]]]:
    """Split an Anthropic SSE body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        if not block:
            continue
        event_line, data_line = block.split("\n")
        assert event_line.startswith("event: ")
        assert data_line.startswith("data: ")
        events.append((event_line[len("event: "):], json.loads(data_line[len("data: "):])))
    return events
