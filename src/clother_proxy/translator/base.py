"""
Base translator interface for converting between chat wire formats.
"""

import abc
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class TranslationResult:
    """Outcome of translating one request or response body."""
    success: bool
    source_format: str
    target_format: str
    translated_data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class BaseTranslator(abc.ABC):
    """
    Base class for all translators.

    ``source_format`` is what the caller speaks and ``target_format`` what the
    upstream speaks; requests go source to target, responses come back.
    """

    def __init__(self, source_format: str, target_format: str):
        self.source_format = source_format
        self.target_format = target_format

    @abc.abstractmethod
    async def translate_request(self, request_data: Dict[str, Any]) -> TranslationResult:
        """Translate a caller request into the upstream format."""

    @abc.abstractmethod
    async def translate_response(self, response_data: Dict[str, Any]) -> TranslationResult:
        """Translate an upstream response back into the caller's format."""

    def _request_ok(self, data: Dict[str, Any]) -> TranslationResult:
        return TranslationResult(True, self.source_format, self.target_format, translated_data=data)

    def _request_failed(self, error: str, error_code: str) -> TranslationResult:
        return TranslationResult(False, self.source_format, self.target_format, error=error, error_code=error_code)

    def _response_ok(self, data: Dict[str, Any]) -> TranslationResult:
        return TranslationResult(True, self.target_format, self.source_format, translated_data=data)

    def _response_failed(self, error: str, error_code: str) -> TranslationResult:
        return TranslationResult(False, self.target_format, self.source_format, error=error, error_code=error_code)
