"""Tests for operation logging middleware."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from hostops_mcp.middleware import LoggingMiddleware, summarize_result


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def logging_middleware(mock_logger: MagicMock) -> LoggingMiddleware:
    return LoggingMiddleware(logger=mock_logger)


def _tool_context(name: str, arguments: dict) -> MagicMock:
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = name
    context.message.arguments = arguments
    return context


@pytest.mark.parametrize(
    ("result", "summary"),
    [
        (None, "null"),
        ({"exitCode": 2, "stdout": ""}, "exit=2"),
        ({"path": "/tmp/x", "size": 12}, "12 bytes"),
        ({"hostname": "web1", "osType": "linux"}, "hostname=web1"),
        (MagicMock(structured_content={"exitCode": 0}), "exit=0"),
        ("text", "str"),
    ],
)
def test_summarize_result(result: object, summary: str) -> None:
    assert summarize_result(result) == summary


@pytest.mark.asyncio
async def test_request_line_shows_target_and_hides_bodies(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    """Script bodies are logged as lengths; the target is user@host:port."""
    context = _tool_context(
        "execute_script",
        {"host": "web1", "port": 2222, "username": "ops", "script": "echo SECRET_TOKEN"},
    )

    await logging_middleware.on_call_tool(context, AsyncMock(return_value={"exitCode": 0}))

    fmt, operation, target, args = mock_logger.info.call_args_list[0].args
    assert operation == "execute_script"
    assert target == "ops@web1:2222"
    assert args == "(script=<17 chars>)"


@pytest.mark.asyncio
async def test_default_port_in_target(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    context = _tool_context("host_metadata", {"host": "db1"})

    await logging_middleware.on_call_tool(context, AsyncMock(return_value={"hostname": "db1"}))

    assert mock_logger.info.call_args_list[0].args[2] == "db1:22"


@pytest.mark.asyncio
async def test_response_line_summarizes_result(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    context = _tool_context("execute_command", {"host": "web1", "command": "false"})

    await logging_middleware.on_call_tool(context, AsyncMock(return_value={"exitCode": 1}))

    level, _fmt, _operation, _target, summary, _duration = mock_logger.log.call_args.args
    assert level == logging.INFO
    assert summary == "exit=1"


@pytest.mark.asyncio
async def test_payloads_are_redacted(mock_logger: MagicMock) -> None:
    """Payload logging never includes upload content."""
    middleware = LoggingMiddleware(logger=mock_logger, include_payloads=True)
    context = _tool_context(
        "upload_file", {"host": "web1", "content": "hunter2", "destination_path": "/tmp/x"}
    )

    await middleware.on_call_tool(context, AsyncMock(return_value={"path": "/tmp/x", "size": 7}))

    logged = " ".join(str(call.args) for call in mock_logger.debug.call_args_list)
    assert "hunter2" not in logged
    assert "<7 chars>" in logged


@pytest.mark.asyncio
async def test_error_is_logged_and_reraised(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    context = _tool_context("host_metadata", {"host": "web1"})

    with pytest.raises(RuntimeError):
        await logging_middleware.on_call_tool(context, AsyncMock(side_effect=RuntimeError("down")))

    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args.args[3] == "RuntimeError"


@pytest.mark.asyncio
async def test_slow_call_logged_as_warning(mock_logger: MagicMock) -> None:
    """Calls over the threshold are logged at WARNING."""
    middleware = LoggingMiddleware(logger=mock_logger, slow_threshold_ms=0)
    context = _tool_context("execute_command", {"host": "web1"})

    await middleware.on_call_tool(context, AsyncMock(return_value=None))

    assert mock_logger.log.call_args.args[0] == logging.WARNING
    assert mock_logger.log.call_args.args[5].endswith("SLOW!")


@pytest.mark.asyncio
async def test_list_tools_counts(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    context = MagicMock()
    context.method = "tools/list"

    await logging_middleware.on_list_tools(context, AsyncMock(return_value=[1, 2, 3, 4, 5]))

    assert mock_logger.info.call_args.args[1] == 5


@pytest.mark.asyncio
async def test_on_message_skips_tool_methods(
    logging_middleware: LoggingMiddleware,
    mock_logger: MagicMock,
) -> None:
    """tools/call is left to its dedicated handler."""
    context = MagicMock()
    context.method = "tools/call"

    await logging_middleware.on_message(context, AsyncMock(return_value="ok"))

    mock_logger.debug.assert_not_called()
