"""Per-operation request logging."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from hostops_mcp.middleware.base import HostOpsMiddleware, elapsed_ms, failure_type

# Arguments carrying file or script bodies are logged by size only
BULK_ARGUMENTS = frozenset({"content", "script"})
# Already shown in the target
TARGET_ARGUMENTS = frozenset({"host", "port", "username"})


def summarize_result(result: Any) -> str:
    """Describe an operation result in a few words.

    Works on the plain dicts the tools return and on MCP tool results
    carrying them as structured content.
    """
    if result is None:
        return "null"

    data = result if isinstance(result, dict) else getattr(result, "structured_content", None)
    if not isinstance(data, dict):
        return type(result).__name__

    if "exitCode" in data:
        return f"exit={data['exitCode']}"
    if "hostname" in data:
        return f"hostname={data['hostname'] or '?'}"
    if "size" in data:
        return f"{data['size']} bytes"
    return f"{len(data)} keys"


class LoggingMiddleware(HostOpsMiddleware):
    """Logs every operation with its SSH target, arguments and duration.

    Script and file bodies never reach the log; only their length does.
    Operations slower than slow_threshold_ms are logged as warnings.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(slow_threshold_ms=5000))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 1000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Log full (redacted) arguments and results at DEBUG.
            max_payload_length: Maximum payload length before truncation.
            slow_threshold_ms: Threshold in ms for slow operation warnings.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _redact(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return {
            key: f"<{len(value)} chars>"
            if key in BULK_ARGUMENTS and isinstance(value, str)
            else value
            for key, value in arguments.items()
        }

    def _format_args(self, arguments: dict[str, Any]) -> str:
        parts = []
        for key, value in self._redact(arguments).items():
            if key in TARGET_ARGUMENTS or value is None:
                continue
            if key in BULK_ARGUMENTS:
                parts.append(f"{key}={value}")
                continue
            if isinstance(value, str) and len(value) > 60:
                value = value[:60] + "..."
            parts.append(f"{key}={value!r}")
        return f"({', '.join(parts)})"

    def _payload(self, data: Any) -> str:
        text = json.dumps(data, default=str)
        if len(text) > self.max_payload_length:
            return text[: self.max_payload_length] + "... [truncated]"
        return text

    def _duration(self, duration_ms: float) -> str:
        if duration_ms >= self.slow_threshold_ms:
            return f"{duration_ms:.1f}ms SLOW!"
        return f"{duration_ms:.1f}ms"

    async def on_call_tool(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log an operation before and after it runs."""
        operation = self.tool_name(context)
        arguments = self.tool_arguments(context)
        target = self.target(arguments)

        self.logger.info(">>> %s %s %s", operation, target, self._format_args(arguments))
        if self.include_payloads:
            self.logger.debug("    Args: %s", self._payload(self._redact(arguments)))

        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            self.logger.error(
                "!!! %s %s -> %s: %s [%s]",
                operation,
                target,
                failure_type(e),
                e,
                self._duration(elapsed_ms(start)),
            )
            raise

        duration_ms = elapsed_ms(start)
        level = logging.WARNING if duration_ms >= self.slow_threshold_ms else logging.INFO
        self.logger.log(
            level,
            "<<< %s %s -> %s [%s]",
            operation,
            target,
            summarize_result(result),
            self._duration(duration_ms),
        )
        if self.include_payloads:
            data = getattr(result, "structured_content", result)
            self.logger.debug("    Result: %s", self._payload(data))
        return result

    async def on_list_tools(self, context: MiddlewareContext, call_next: Any) -> Any:
        start = time.perf_counter()
        result = await call_next(context)
        count = len(result) if isinstance(result, (list, tuple)) else "?"
        self.logger.info(
            "Listed %s tool(s) [%s]", count, self._duration(elapsed_ms(start))
        )
        return result

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Trace protocol traffic other than tool calls and listings."""
        if context.method in ("tools/call", "tools/list"):
            return await call_next(context)

        start = time.perf_counter()
        result = await call_next(context)
        self.logger.debug(
            "MCP %s [%s]", context.method, self._duration(elapsed_ms(start))
        )
        return result
