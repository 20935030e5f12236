"""
API routes for the translation proxy.
"""

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ..errors import InvalidRequestError, UpstreamResponseError
from ..providers.openai_provider import OpenAICompatibleProvider
from ..translator.anthropic_to_openai import AnthropicToOpenAITranslator
from ..translator.stream import StreamTranslator, translate_stream

logger = structlog.get_logger(__name__)

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


# Dependency injection functions
async def get_provider(request: Request) -> OpenAICompatibleProvider:
    """Get upstream provider from app state."""
    return request.app.state.provider


async def get_translator(request: Request) -> AnthropicToOpenAITranslator:
    """Get request translator from app state."""
    return request.app.state.translator


async def read_json_body(request: Request) -> Dict[str, Any]:
    try:
        return await request.json()
    except ValueError:
        raise InvalidRequestError("Invalid JSON") from None


@router.post("/messages")
async def create_message(
    request: Request,
    provider: OpenAICompatibleProvider = Depends(get_provider),
    translator: AnthropicToOpenAITranslator = Depends(get_translator),
):
    """
    Anthropic Messages endpoint.

    Accepts an Anthropic request, forwards it upstream in OpenAI format and
    returns the answer in Anthropic format, streamed or not as requested.
    """
    body = await read_json_body(request)

    translation = await translator.translate_request(body)
    if not translation.success:
        raise InvalidRequestError(translation.error or "Translation failed")
    openai_request = translation.translated_data

    if openai_request["stream"]:
        upstream = await provider.chat_completion_stream(openai_request)
        stream_translator = StreamTranslator(model=translator.target_model)
        logger.info("Streaming response", message_id=stream_translator.message_id)
        return StreamingResponse(
            translate_stream(upstream, stream_translator),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    completion = await provider.chat_completion(openai_request)
    translation = await translator.translate_response(completion)
    if not translation.success:
        raise UpstreamResponseError(translation.error or "Translation failed")

    return JSONResponse(content=translation.translated_data)
