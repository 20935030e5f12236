"""
Test Configuration Module
"""

from typing import Any, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from clother_proxy.config import ProxyConfig
from clother_proxy.main import create_app


TEST_MODEL = "openai/gpt-4o"
TEST_UPSTREAM = "https://upstream.test/api/v1/chat/completions"


@pytest.fixture
def config() -> ProxyConfig:
    """Configuration that ignores the real environment and .env files"""
    return ProxyConfig(
        _env_file=None,
        OPENROUTER_API_KEY="sk-test",
        OPENROUTER_MODEL=TEST_MODEL,
        OPENROUTER_URL=TEST_UPSTREAM,
    )


@pytest.fixture
def make_client(config) -> Callable[[Callable[[httpx.Request], Any]], AsyncClient]:
    """
    Build an AsyncClient talking to the proxy, whose upstream is served by
    ``handler`` through httpx.MockTransport.
    """
    def _make(handler):
        app = create_app(config, transport=httpx.MockTransport(handler))
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://proxy.test")

    return _make
