"""HostOps MCP FastMCP server.

This is a thin wrapper that wires together the MCP server with tools.
All business logic is delegated to the tools/ and services/ modules.
"""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from hostops_mcp.config import Settings
from hostops_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from hostops_mcp.services import get_config
from hostops_mcp.tools import (
    download_file,
    execute_command,
    execute_script,
    host_metadata,
    upload_file,
)
from hostops_mcp.utils.console import ColorfulFormatter


def _configure_logging(settings: Settings) -> None:
    """Configure colorful logging for the hostops_mcp package.

    This is called at module load time to ensure logging is configured
    before any loggers are used, regardless of how the server is started.
    """
    use_colors = settings.log_colors

    # Disable colors if not a TTY
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("hostops_mcp")
    package_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    # Only add handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors, tz=settings.log_tz))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    # Suppress noisy third-party loggers
    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "asyncssh",
        "asyncssh.sftp",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        lg = logging.getLogger(noisy_logger)
        lg.setLevel(logging.WARNING)


# Configure logging at module load time
_configure_logging(get_config().settings)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(
    server: FastMCP,
    errors: ErrorHandlingMiddleware | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """Load application configuration at startup.

    Args:
        server: The FastMCP server instance
        errors: Failure accounting middleware whose totals are logged at shutdown

    Yields:
        Dict describing the loaded credentials (never the secrets themselves)
    """
    logger.info("HostOps MCP server starting up")

    config = get_config()
    logger.info(
        "Credentials: private_key=%s, default_username=%s, known_hosts=%d",
        "configured" if config.private_key else "MISSING",
        config.username or "(none)",
        len(config.host_keys.hosts),
    )
    logger.info("HostOps MCP server ready to accept connections")

    try:
        yield {
            "private_key_configured": bool(config.private_key),
            "known_hosts": config.host_keys.hosts,
        }
    finally:
        # Sessions are operation-scoped; nothing is left open here
        if errors is not None and errors.get_error_stats():
            logger.warning(
                "Failures this run: by type %s, by host %s",
                errors.get_error_stats(),
                errors.get_host_stats(),
            )
        logger.info("HostOps MCP server shutdown complete")


def configure_middleware(server: FastMCP, errors: ErrorHandlingMiddleware) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging (with integrated timing)

    Args:
        server: The FastMCP server to configure.
        errors: Failure accounting middleware shared with the lifespan.
    """
    settings = get_config().settings

    # First added = innermost
    server.add_middleware(errors)
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=float(settings.slow_threshold_ms),
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with all middleware and tools.

    Returns:
        Configured FastMCP server instance
    """
    errors = ErrorHandlingMiddleware(
        include_traceback=get_config().settings.include_traceback
    )
    server = FastMCP(
        "hostops_mcp",
        lifespan=partial(app_lifespan, errors=errors),
    )

    configure_middleware(server, errors)

    server.tool(execute_command)
    server.tool(execute_script)
    server.tool(upload_file)
    server.tool(download_file)
    server.tool(host_metadata)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
