"""Failure accounting middleware."""

import logging
from collections import Counter
from collections.abc import Callable
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from hostops_mcp.middleware.base import HostOpsMiddleware, failure_type

ErrorCallback = Callable[[Exception, MiddlewareContext], None]


class ErrorHandlingMiddleware(HostOpsMiddleware):
    """Counts failed requests by failure type and by target host.

    Errors are logged and re-raised unchanged; the MCP layer turns them
    into error responses. Connection failures are logged with the reason
    reported by the transport (timeout, host_key_mismatch, ...).

    Example:
        >>> errors = ErrorHandlingMiddleware()
        >>> mcp.add_middleware(errors)
        >>> errors.get_error_stats()
        {'ConnectionFault': 2}
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
        error_callback: ErrorCallback | None = None,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Log the full traceback of each failure.
            error_callback: Called with (exception, context) on each failure.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self.error_callback = error_callback
        self._by_type: Counter[str] = Counter()
        self._by_host: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Failure counts keyed by failure type name."""
        return dict(self._by_type)

    def get_host_stats(self) -> dict[str, int]:
        """Failure counts keyed by target host."""
        return dict(self._by_host)

    def _describe(self, error: Exception) -> str:
        reason = getattr(error.__cause__, "reason", None)
        if isinstance(reason, str):
            return f"{failure_type(error)}[{reason}]"
        return failure_type(error)

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        try:
            return await call_next(context)
        except Exception as e:
            self._by_type[failure_type(e)] += 1

            host = self.tool_arguments(context).get("host")
            if host:
                self._by_host[host] += 1

            self.logger.error(
                "Error in %s%s: %s: %s",
                context.method,
                f" ({host})" if host else "",
                self._describe(e),
                e,
                exc_info=e if self.include_traceback else None,
            )

            if self.error_callback:
                try:
                    self.error_callback(e, context)
                except Exception as callback_error:
                    self.logger.warning("Error callback failed: %s", callback_error)

            raise
