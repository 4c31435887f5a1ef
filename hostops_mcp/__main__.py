"""Command-line entry point: python -m hostops_mcp or hostops-mcp."""

import logging
from typing import Any

from hostops_mcp.server import mcp  # importing the server configures logging
from hostops_mcp.services import get_config

logger = logging.getLogger(__name__)


def transport_options() -> dict[str, Any]:
    """Keyword arguments for FastMCP.run() from the active config."""
    config = get_config()
    if config.transport == "stdio":
        return {"transport": "stdio"}
    return {"transport": "http", "host": config.http_host, "port": config.http_port}


def run_server() -> None:
    """Run the MCP server on the configured transport."""
    options = transport_options()
    logger.info(
        "Starting HostOps MCP server (%s)",
        ", ".join(f"{key}={value}" for key, value in options.items()),
    )
    mcp.run(**options)


if __name__ == "__main__":
    run_server()
