"""
Anthropic Messages to OpenAI Chat Completions translator.
Converts requests from the format the CLI speaks into the upstream format, and
converts non-streaming upstream responses back.
"""

import json
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError

from .base import BaseTranslator, TranslationResult
from .identity import rewrite_system_prompt
from .schemas import ContentBlock, Message, MessagesRequest, ToolSpec

logger = structlog.get_logger(__name__)


FINISH_REASON_TO_STOP_REASON = {
    "length": "max_tokens",
    "tool_calls": "tool_use",
}


def map_stop_reason(finish_reason: Optional[str]) -> str:
    """Map an upstream finish_reason onto an Anthropic stop_reason."""
    return FINISH_REASON_TO_STOP_REASON.get(finish_reason or "", "end_turn")


def convert_tool(tool: ToolSpec) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.input_schema,
        },
    }


def convert_tool_choice(tool_choice: Any) -> Optional[Union[str, Dict[str, Any]]]:
    """Translate an Anthropic tool_choice; unrecognized values are dropped."""
    if not isinstance(tool_choice, dict):
        return None
    choice_type = tool_choice.get("type")
    if choice_type == "auto":
        return "auto"
    if choice_type == "any":
        return "required"
    if choice_type == "none":
        return "none"
    if choice_type == "tool" and tool_choice.get("name"):
        return {"type": "function", "function": {"name": tool_choice["name"]}}
    return None


def _tool_result_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content)


def _tool_call(block: ContentBlock) -> Dict[str, Any]:
    arguments = block.input if block.input is not None else {}
    return {
        "id": block.id,
        "type": "function",
        "function": {"name": block.name, "arguments": json.dumps(arguments)},
    }


def convert_message(message: Message) -> List[Dict[str, Any]]:
    """
    Convert one Anthropic message into one or more OpenAI messages.

    Tool results become separate ``tool`` messages, emitted in the order they
    appear and ahead of the message built from the remaining blocks.
    """
    if isinstance(message.content, str):
        return [{"role": message.role, "content": message.content}]

    result: List[Dict[str, Any]] = []
    texts: List[str] = []
    tool_calls: List[Dict[str, Any]] = []

    for block in message.content:
        if block.type == "text":
            if block.text is not None:
                texts.append(block.text)
        elif block.type == "tool_use":
            tool_calls.append(_tool_call(block))
        elif block.type == "tool_result":
            result.append({
                "role": "tool",
                "tool_call_id": block.tool_use_id,
                "content": _tool_result_content(block.content),
            })

    if message.role == "assistant":
        if texts or tool_calls:
            assistant: Dict[str, Any] = {"role": "assistant"}
            if texts:
                assistant["content"] = "\n".join(texts)
            if tool_calls:
                assistant["tool_calls"] = tool_calls
            result.append(assistant)
    elif message.role == "user" and texts:
        result.append({"role": "user", "content": "\n".join(texts)})

    return result


class AnthropicToOpenAITranslator(BaseTranslator):
    """Translator from Anthropic Messages to OpenAI Chat Completions."""

    def __init__(self, target_model: str):
        """
        Initialize translator.

        Args:
            target_model: Upstream model that replaces whatever the CLI asked for
        """
        super().__init__("anthropic", "openai")
        self.target_model = target_model

    async def translate_request(self, request_data: Dict[str, Any]) -> TranslationResult:
        """
        Translate an Anthropic request to OpenAI format.

        Args:
            request_data: Anthropic request body

        Returns:
            TranslationResult with the OpenAI request body
        """
        try:
            request = MessagesRequest.model_validate(request_data)
        except ValidationError as e:
            return self._request_failed(
                f"Invalid request body: {e.error_count()} validation error(s): {e.errors()[0]['msg']}",
                "invalid_request",
            )

        return self._request_ok(self.build_request(request))

    def build_request(self, request: MessagesRequest) -> Dict[str, Any]:
        messages: List[Dict[str, Any]] = []

        system_text = request.system_text()
        if system_text:
            messages.append({
                "role": "system",
                "content": rewrite_system_prompt(system_text, self.target_model),
            })

        for message in request.messages:
            messages.extend(convert_message(message))

        openai_request: Dict[str, Any] = {
            "model": self.target_model,
            "stream": request.stream,
            "messages": messages,
        }

        if request.max_tokens is not None:
            openai_request["max_tokens"] = request.max_tokens

        if request.temperature is not None:
            openai_request["temperature"] = request.temperature

        if request.tools:
            openai_request["tools"] = [convert_tool(t) for t in request.tools]
            tool_choice = convert_tool_choice(request.tool_choice)
            if tool_choice is not None:
                openai_request["tool_choice"] = tool_choice

        return openai_request

    async def translate_response(self, response_data: Dict[str, Any]) -> TranslationResult:
        """
        Translate a non-streaming OpenAI response to Anthropic format.

        Args:
            response_data: OpenAI chat completion body

        Returns:
            TranslationResult with the Anthropic message body
        """
        choices = response_data.get("choices") or []
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return self._response_failed("No response: upstream returned no choices", "no_choices")

        choice = choices[0]
        message = choice.get("message") or {}
        if not isinstance(message, dict):
            return self._response_failed(
                f"Upstream returned a malformed message: {str(message)[:2000]}",
                "malformed_message",
            )

        content: List[Dict[str, Any]] = []
        text = message.get("content")
        if isinstance(text, str) and text:
            content.append({"type": "text", "text": text})

        tool_calls = message.get("tool_calls") or []
        if isinstance(tool_calls, list):
            for call in tool_calls:
                if isinstance(call, dict):
                    content.append(self._tool_use_block(call))

        anthropic_response: Dict[str, Any] = {
            "id": f"msg_{response_data.get('id', '')}",
            "type": "message",
            "role": "assistant",
            "model": response_data.get("model"),
            "content": content,
            "stop_reason": map_stop_reason(choice.get("finish_reason")),
            "stop_sequence": None,
        }

        usage = response_data.get("usage")
        if isinstance(usage, dict):
            anthropic_response["usage"] = {
                "input_tokens": usage.get("prompt_tokens", 0),
                "output_tokens": usage.get("completion_tokens", 0),
            }

        return self._response_ok(anthropic_response)

    def _tool_use_block(self, call: Dict[str, Any]) -> Dict[str, Any]:
        function = call.get("function")
        if not isinstance(function, dict):
            function = {}
        raw_arguments = function.get("arguments") or "{}"
        try:
            arguments = raw_arguments if isinstance(raw_arguments, dict) else json.loads(raw_arguments)
        except (TypeError, json.JSONDecodeError):
            logger.warning(
                "Unparsable tool call arguments",
                tool=function.get("name"),
                tool_call_id=call.get("id"),
            )
            arguments = {}

        return {
            "type": "tool_use",
            "id": call.get("id"),
            "name": function.get("name"),
            "input": arguments,
        }
