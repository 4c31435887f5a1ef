"""Tests for failure accounting middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastmcp.exceptions import ToolError

from hostops_mcp.middleware import ErrorHandlingMiddleware, failure_type
from hostops_mcp.services.failures import ConnectionFault


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def error_middleware(mock_logger: MagicMock) -> ErrorHandlingMiddleware:
    """Create an error handling middleware instance."""
    return ErrorHandlingMiddleware(logger=mock_logger)


@pytest.fixture
def mock_context() -> MagicMock:
    """Context for an execute_command call against web1."""
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = "execute_command"
    context.message.arguments = {"host": "web1", "command": "uptime"}
    return context


def _tool_error_from_fault() -> ToolError:
    fault = ConnectionFault("web1", ConnectionFault.TIMEOUT, TimeoutError())
    try:
        raise ToolError(fault.message) from fault
    except ToolError as e:
        return e


def test_failure_type_uses_cause() -> None:
    """Tool errors are counted under the operation failure behind them."""
    assert failure_type(_tool_error_from_fault()) == "ConnectionFault"
    assert failure_type(ToolError("plain")) == "ToolError"
    assert failure_type(KeyError("x")) == "KeyError"


@pytest.mark.asyncio
async def test_passes_through_success(
    error_middleware: ErrorHandlingMiddleware,
    mock_context: MagicMock,
) -> None:
    """Successful requests are returned untouched."""
    call_next = AsyncMock(return_value="success")

    assert await error_middleware.on_message(mock_context, call_next) == "success"
    assert error_middleware.get_error_stats() == {}


@pytest.mark.asyncio
async def test_reraises_and_counts_by_type_and_host(
    error_middleware: ErrorHandlingMiddleware,
    mock_context: MagicMock,
) -> None:
    """Errors propagate and are tallied by failure type and host."""
    call_next = AsyncMock(side_effect=_tool_error_from_fault())

    for _ in range(2):
        with pytest.raises(ToolError):
            await error_middleware.on_message(mock_context, call_next)

    assert error_middleware.get_error_stats() == {"ConnectionFault": 2}
    assert error_middleware.get_host_stats() == {"web1": 2}


@pytest.mark.asyncio
async def test_logs_connection_reason(
    error_middleware: ErrorHandlingMiddleware,
    mock_context: MagicMock,
    mock_logger: MagicMock,
) -> None:
    """The transport reason is part of the log line."""
    with pytest.raises(ToolError):
        await error_middleware.on_message(
            mock_context, AsyncMock(side_effect=_tool_error_from_fault())
        )

    args = mock_logger.error.call_args.args
    assert args[2] == " (web1)"
    assert args[3] == "ConnectionFault[timeout]"
    assert mock_logger.error.call_args.kwargs["exc_info"] is None


@pytest.mark.asyncio
async def test_traceback_when_enabled(mock_context: MagicMock, mock_logger: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware(logger=mock_logger, include_traceback=True)
    error = ValueError("test error")

    with pytest.raises(ValueError):
        await middleware.on_message(mock_context, AsyncMock(side_effect=error))

    assert mock_logger.error.call_args.kwargs["exc_info"] is error


@pytest.mark.asyncio
async def test_non_tool_message_has_no_host(mock_logger: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware(logger=mock_logger)
    context = MagicMock()
    context.method = "resources/list"
    context.message = MagicMock(spec=[])

    with pytest.raises(RuntimeError):
        await middleware.on_message(context, AsyncMock(side_effect=RuntimeError("x")))

    assert middleware.get_host_stats() == {}
    assert middleware.get_error_stats() == {"RuntimeError": 1}


@pytest.mark.asyncio
async def test_callback_failure_is_logged(mock_context: MagicMock, mock_logger: MagicMock) -> None:
    """A failing callback does not replace the original error."""
    callback = MagicMock(side_effect=RuntimeError("callback broke"))
    middleware = ErrorHandlingMiddleware(logger=mock_logger, error_callback=callback)

    with pytest.raises(ValueError):
        await middleware.on_message(mock_context, AsyncMock(side_effect=ValueError("x")))

    callback.assert_called_once()
    mock_logger.warning.assert_called_once()
