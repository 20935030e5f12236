"""
Configuration management for the translation proxy.
Uses pydantic-settings so the launcher can configure everything through the
process environment (or a local .env file).
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .providers.catalog import get_profile


_OPENROUTER = get_profile("openrouter")


class ProxyConfig(BaseSettings):
    """Proxy configuration, read once at startup and never mutated."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # Upstream
    api_key: str = Field(default="", alias=_OPENROUTER.credential_var)
    model: str = Field(default=_OPENROUTER.default_model, alias="OPENROUTER_MODEL")
    upstream_url: str = Field(default=_OPENROUTER.base_url, alias="OPENROUTER_URL")
    referer: str = Field(default="https://github.com/clother", alias="CLOTHER_REFERER")
    request_timeout: float = Field(default=300.0, alias="PROXY_TIMEOUT")

    # Server
    host: str = Field(default="127.0.0.1", alias="PROXY_HOST")
    port: int = Field(default=8378, alias="PROXY_PORT")

    # Logging
    log_level: str = Field(default="INFO", alias="PROXY_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("model", "upstream_url")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.api_key:
            errors.append(f"{_OPENROUTER.credential_var} is not set")

        if not self.model:
            errors.append("OPENROUTER_MODEL is empty")

        if not (1 <= self.port <= 65535):
            errors.append(f"Port {self.port} is out of valid range (1-65535)")

        if self.request_timeout <= 0:
            errors.append(f"Timeout must be positive, got {self.request_timeout}")

        if not self.upstream_url.startswith(("http://", "https://")):
            errors.append(f"Upstream URL is not an http(s) URL: {self.upstream_url}")

        return errors


def load_config(**overrides) -> ProxyConfig:
    """
    Build the configuration from the environment.

    Args:
        **overrides: Field values that take precedence over the environment
            (used by the command line entry point)

    Returns:
        ProxyConfig instance
    """
    fields = ProxyConfig.model_fields
    values = {
        fields[k].alias or k: v
        for k, v in overrides.items()
        if v is not None
    }
    return ProxyConfig(**values)


def describe(config: ProxyConfig) -> dict:
    """Loggable summary of a configuration; never includes the credential."""
    return {
        "profile": _OPENROUTER.name,
        "model": config.model,
        "upstream_url": config.upstream_url,
        "host": config.host,
        "port": config.port,
        "timeout": config.request_timeout,
        "api_key_set": bool(config.api_key),
    }
