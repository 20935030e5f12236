"""
Translator module for the proxy.
Converts between the Anthropic Messages and OpenAI Chat Completions formats.
"""

from .base import BaseTranslator, TranslationResult
from .anthropic_to_openai import AnthropicToOpenAITranslator, map_stop_reason
from .identity import rewrite_system_prompt
from .stream import StreamTranslator, translate_stream

__all__ = [
    "BaseTranslator",
    "TranslationResult",
    "AnthropicToOpenAITranslator",
    "map_stop_reason",
    "rewrite_system_prompt",
    "StreamTranslator",
    "translate_stream",
]
