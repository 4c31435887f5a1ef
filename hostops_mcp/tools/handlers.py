"""Shared handling for operation tools.

Each tool resolves its connection parameters, opens one session, runs one
unit of work inside it, and converts typed failures into MCP tool errors.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastmcp.exceptions import ToolError

from hostops_mcp.services import (
    OperationFailure,
    Session,
    get_config,
    open_session,
    resolve_connection_parameters,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_operation(
    operation: str,
    host: str,
    port: int | None,
    username: str | None,
    action: Callable[[Session], Awaitable[T]],
) -> T:
    """Run one unit of work in a fresh session.

    Args:
        operation: Operation name for log messages
        host: Target host
        port: Target port (22 when None)
        username: Optional username override
        action: Coroutine function receiving the open session

    Returns:
        Whatever action returns

    Raises:
        ToolError: If the operation fails, with the failure description
    """
    config = get_config()

    try:
        params = resolve_connection_parameters(config, host, port, username)
        async with open_session(params, connect_timeout=config.connect_timeout) as session:
            return await action(session)
    except OperationFailure as e:
        logger.error("%s on %s failed: %s", operation, host, e.message)
        raise ToolError(e.message) from e
