"""
Main FastAPI application for the clother translation proxy.

The launcher starts this process with OPENROUTER_API_KEY, OPENROUTER_MODEL and
PROXY_PORT set, waits for /health, then points the CLI's base URL at it.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.routes import router as api_router
from .config import ProxyConfig, describe, load_config
from .errors import ProxyError
from .providers.openai_provider import OpenAICompatibleProvider
from .translator.anthropic_to_openai import AnthropicToOpenAITranslator


logger = structlog.get_logger(__name__)

_HTTP_ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: "invalid_request_error",
    status.HTTP_404_NOT_FOUND: "not_found_error",
    status.HTTP_405_METHOD_NOT_ALLOWED: "invalid_request_error",
}


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog on top of the standard logging module."""
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    # httpx logs every request at INFO, which duplicates our own logging.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(
    config: Optional[ProxyConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        config: Proxy configuration; read from the environment when omitted
        transport: Alternative httpx transport for the upstream client

    Returns:
        FastAPI application
    """
    config = config or load_config()
    provider = OpenAICompatibleProvider.from_config(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan manager for FastAPI application."""
        logger.info("Starting clother proxy", **describe(config))
        yield
        logger.info("Shutting down clother proxy")
        await provider.shutdown()

    app = FastAPI(
        title="Clother Proxy",
        description="Anthropic Messages to OpenAI Chat Completions translation proxy",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    app.state.config = config
    app.state.provider = provider
    app.state.translator = AnthropicToOpenAITranslator(target_model=config.model)

    # Middleware for request logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests."""
        start_time = asyncio.get_event_loop().time()
        method = request.method
        path = request.url.path

        response = await call_next(request)
        process_time = asyncio.get_event_loop().time() - start_time

        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=response.status_code,
            process_time=f"{process_time:.3f}s",
        )

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response

    # Exception handlers
    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        logger.warning(
            "Request failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        error = ProxyError(
            message=str(exc.detail),
            error_type=_HTTP_ERROR_TYPES.get(exc.status_code, "api_error"),
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error.to_dict(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        error = ProxyError("Internal server error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error.to_dict(),
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Liveness check polled by the launcher."""
        return {"status": "ok"}

    app.include_router(api_router, prefix="/v1")

    return app


def main(argv=None):
    """Main entry point for the application."""
    parser = argparse.ArgumentParser(description="Clother translation proxy")
    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind the server to (overrides PROXY_HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to run the server on (overrides PROXY_PORT)",
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Upstream model identifier (overrides OPENROUTER_MODEL)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level (overrides PROXY_LOG_LEVEL)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)

    config = load_config(
        host=args.host,
        port=args.port,
        model=args.model,
        log_level=args.log_level,
    )
    configure_logging(config.log_level)

    errors = config.validate_config()
    if errors:
        for error in errors:
            logger.error("Configuration error", error=error)
        return 1

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_config=None,
        access_log=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
