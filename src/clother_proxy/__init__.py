"""
Clother proxy: serves the Anthropic Messages API on top of an OpenAI-compatible
chat completions upstream.
"""

__version__ = "1.0.0"
