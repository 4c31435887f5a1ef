"""HostOps MCP middleware components."""

from hostops_mcp.middleware.base import HostOpsMiddleware, failure_type
from hostops_mcp.middleware.errors import ErrorHandlingMiddleware
from hostops_mcp.middleware.logging import LoggingMiddleware, summarize_result

__all__ = [
    "ErrorHandlingMiddleware",
    "HostOpsMiddleware",
    "LoggingMiddleware",
    "failure_type",
    "summarize_result",
]
