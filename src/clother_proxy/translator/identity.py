"""
System prompt identity rewriting.

The CLI's built-in system prompt tells the model it is Claude, made by
Anthropic. Models from other vendors tend to repeat that, so the prompt is
rewritten to name the model actually answering.
"""

from typing import List, Tuple

from ..providers.catalog import vendor_display_name


IDENTITY_BANNER = (
    "[IDENTITY] You are {model}, created by {vendor}. "
    "When asked who you are, say you are {model} made by {vendor}. "
    "You are NOT Claude and NOT made by Anthropic.\n\n"
)


def split_model_id(model: str) -> Tuple[str, str]:
    """Split "<vendor>/<model>" into its parts; vendor is "" when unqualified."""
    vendor, sep, name = model.partition("/")
    if not sep:
        return "", model
    return vendor, name


def _replacements(model_name: str, vendor: str) -> List[Tuple[str, str]]:
    # Longest phrases first, otherwise "You are Claude" would eat the others.
    return [
        ("You are Claude, an AI assistant made by Anthropic", f"You are {model_name}"),
        ("You are Claude Code", f"You are {model_name}"),
        ("You are Claude", f"You are {model_name}"),
        ("made by Anthropic", f"made by {vendor}"),
        ("by Anthropic", f"by {vendor}"),
    ]


def rewrite_system_prompt(text: str, model: str) -> str:
    """
    Neutralize the vendor identity baked into a system prompt.

    Args:
        text: Original system prompt text
        model: Target model identifier, optionally "<vendor>/<model>"

    Returns:
        The identity banner followed by the rewritten prompt
    """
    vendor, model_name = split_model_id(model)
    display = vendor_display_name(vendor)

    result = text
    for old, new in _replacements(model_name, display):
        result = result.replace(old, new)

    return IDENTITY_BANNER.format(model=model_name, vendor=display) + result
