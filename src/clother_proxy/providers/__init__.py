"""
Provider module for the proxy.
Holds the provider catalog and the OpenAI-compatible upstream client.
"""

from .catalog import PROVIDERS, ProviderProfile, UnknownProviderError, get_profile, is_configured
from .openai_provider import OpenAICompatibleProvider

__all__ = [
    "PROVIDERS",
    "ProviderProfile",
    "UnknownProviderError",
    "get_profile",
    "is_configured",
    "OpenAICompatibleProvider",
]
