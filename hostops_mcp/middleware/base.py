"""Shared pieces for HostOps MCP middleware."""

import logging
import time
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext


def failure_type(error: BaseException) -> str:
    """Name the failure behind an error.

    Tool errors raised from a typed operation failure are reported under
    the failure's class name (e.g. ConnectionFault).
    """
    if isinstance(error, ToolError) and error.__cause__ is not None:
        return type(error.__cause__).__name__
    return type(error).__name__


def elapsed_ms(start: float) -> float:
    """Milliseconds since a time.perf_counter() reading."""
    return (time.perf_counter() - start) * 1000


class HostOpsMiddleware(Middleware):
    """Middleware base that knows how operation tool calls are shaped.

    Every operation tool takes host, port and username, so a call can be
    described as "<tool> <user@host:port>" without looking at its result.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def tool_name(context: MiddlewareContext) -> str:
        return getattr(context.message, "name", None) or "unknown"

    @staticmethod
    def tool_arguments(context: MiddlewareContext) -> dict[str, Any]:
        args = getattr(context.message, "arguments", None)
        return args if isinstance(args, dict) else {}

    @staticmethod
    def target(arguments: dict[str, Any]) -> str:
        """Format the SSH target named by a tool call's arguments."""
        host = arguments.get("host")
        if not host:
            return "-"
        port = arguments.get("port") or 22
        username = arguments.get("username")
        prefix = f"{username}@" if username else ""
        return f"{prefix}{host}:{port}"
