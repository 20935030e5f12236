"""
Provider catalog.

One immutable record per supported provider profile. Launchers use it to find
the credential variable, endpoint and model aliases for a profile; the proxy
uses the ``openrouter`` entry for its upstream defaults.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class UnknownProviderError(KeyError):
    """Raised when a provider id is not in the catalog."""


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of a provider profile."""
    name: str
    display_name: str
    credential_var: str = ""
    base_url: str = ""
    default_model: str = ""
    model_tier_overrides: Mapping[str, str] = field(default_factory=dict)
    requires_proxy: bool = False

    @property
    def is_native(self) -> bool:
        return not self.credential_var

    def model_for_tier(self, tier: str) -> str:
        """
        Resolve the model used for a tier alias (haiku, sonnet, opus, small).

        Args:
            tier: Tier alias requested by the CLI

        Returns:
            Tier override if one exists, otherwise the default model
        """
        return self.model_tier_overrides.get(tier.lower(), self.default_model)


def _tiers(**overrides: str) -> Mapping[str, str]:
    return MappingProxyType(dict(overrides))


_GLM_TIERS = _tiers(haiku="glm-4.5-air", sonnet="glm-4.6", opus="glm-4.6")

PROVIDERS: Mapping[str, ProviderProfile] = MappingProxyType({
    "native": ProviderProfile(
        name="native",
        display_name="Native Anthropic",
    ),
    "zai": ProviderProfile(
        name="zai",
        display_name="Z.AI International",
        credential_var="ZAI_API_KEY",
        base_url="https://api.z.ai/api/anthropic",
        default_model="glm-4.6",
        model_tier_overrides=_GLM_TIERS,
    ),
    "zai-cn": ProviderProfile(
        name="zai-cn",
        display_name="Z.AI China",
        credential_var="ZAI_CN_API_KEY",
        base_url="https://open.bigmodel.cn/api/anthropic",
        default_model="glm-4.6",
        model_tier_overrides=_GLM_TIERS,
    ),
    "minimax": ProviderProfile(
        name="minimax",
        display_name="MiniMax International",
        credential_var="MINIMAX_API_KEY",
        base_url="https://api.minimax.io/anthropic",
        default_model="MiniMax-M2",
    ),
    "minimax-cn": ProviderProfile(
        name="minimax-cn",
        display_name="MiniMax China",
        credential_var="MINIMAX_CN_API_KEY",
        base_url="https://api.minimaxi.com/anthropic",
        default_model="MiniMax-M2",
    ),
    "kimi": ProviderProfile(
        name="kimi",
        display_name="Kimi K2",
        credential_var="KIMI_API_KEY",
        base_url="https://api.kimi.com/coding/",
        default_model="kimi-k2-thinking-turbo",
        model_tier_overrides=_tiers(small="kimi-k2-turbo-preview"),
    ),
    "moonshot": ProviderProfile(
        name="moonshot",
        display_name="Moonshot AI",
        credential_var="MOONSHOT_API_KEY",
        base_url="https://api.moonshot.ai/anthropic",
        default_model="kimi-k2-turbo-preview",
    ),
    "ve": ProviderProfile(
        name="ve",
        display_name="VolcEngine",
        credential_var="ARK_API_KEY",
        base_url="https://ark.cn-beijing.volces.com/api/coding",
        default_model="doubao-seed-code-preview-latest",
    ),
    "deepseek": ProviderProfile(
        name="deepseek",
        display_name="DeepSeek",
        credential_var="DEEPSEEK_API_KEY",
        base_url="https://api.deepseek.com/anthropic",
        default_model="deepseek-chat",
        model_tier_overrides=_tiers(small="deepseek-chat"),
    ),
    "mimo": ProviderProfile(
        name="mimo",
        display_name="Xiaomi MiMo",
        credential_var="MIMO_API_KEY",
        base_url="https://api.xiaomimimo.com/anthropic",
        default_model="mimo-v2-flash",
        model_tier_overrides=_tiers(
            haiku="mimo-v2-flash", sonnet="mimo-v2-flash", opus="mimo-v2-flash"
        ),
    ),
    "openrouter": ProviderProfile(
        name="openrouter",
        display_name="OpenRouter",
        credential_var="OPENROUTER_API_KEY",
        base_url="https://openrouter.ai/api/v1/chat/completions",
        default_model="openai/gpt-4o",
        requires_proxy=True,
    ),
})

# Vendor prefixes as used in "<vendor>/<model>" identifiers.
VENDOR_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    "mistralai": "Mistral AI",
    "openai": "OpenAI",
    "google": "Google",
    "anthropic": "Anthropic",
    "meta-llama": "Meta",
    "deepseek": "DeepSeek",
    "qwen": "Alibaba",
    "cohere": "Cohere",
    "x-ai": "xAI",
})


def get_profile(name: str) -> ProviderProfile:
    """Look up a provider profile by id."""
    try:
        return PROVIDERS[name.lower()]
    except KeyError:
        raise UnknownProviderError(name) from None


def is_configured(profile: ProviderProfile, environ: Optional[Dict[str, str]] = None) -> bool:
    """
    Check whether the credential a profile needs is present.

    Args:
        profile: Provider profile
        environ: Environment mapping to inspect (defaults to ``os.environ``)

    Returns:
        True for the native profile or when the credential variable is non-empty
    """
    if profile.is_native:
        return True
    if environ is None:
        environ = dict(os.environ)
    return bool(environ.get(profile.credential_var))


def vendor_display_name(vendor: str) -> str:
    """Human-readable vendor name; unknown vendors are returned as-is."""
    return VENDOR_DISPLAY_NAMES.get(vendor.lower(), vendor)
