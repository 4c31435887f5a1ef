"""Tests for the MCP tool functions."""

from collections.abc import Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import asyncssh
import pytest
from fastmcp.exceptions import ToolError

from hostops_mcp.config import Config, Settings
from hostops_mcp.services import ConnectionFault, ExecutionFault, set_config
from hostops_mcp.tools import (
    download_file,
    execute_command,
    execute_script,
    host_metadata,
    upload_file,
)


@pytest.fixture
def ssh(mock_connection: MagicMock) -> Generator[AsyncMock, None, None]:
    """Patch key decoding and connect; yields the connect mock."""
    with (
        patch("asyncssh.import_private_key"),
        patch("asyncssh.connect", new_callable=AsyncMock, return_value=mock_connection) as mock_connect,
    ):
        yield mock_connect


@pytest.fixture(autouse=True)
def app_config(config: Config) -> Config:
    set_config(config)
    return config


class TestExecuteCommand:
    """execute_command tool."""

    @pytest.mark.asyncio
    async def test_returns_result_dict(
        self,
        ssh: AsyncMock,
        mock_connection: MagicMock,
        completed: Callable[..., MagicMock],
    ) -> None:
        """The tool returns stdout, stderr, exitCode and durationMs."""
        mock_connection.run.return_value = completed(stdout="up 3 days\n", returncode=0)

        result = await execute_command("web1", "uptime")

        assert result["stdout"] == "up 3 days\n"
        assert result["exitCode"] == 0
        assert set(result) == {"stdout", "stderr", "exitCode", "durationMs"}
        assert ssh.call_args.kwargs["username"] == "deploy"
        mock_connection.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_per_call_overrides(self, ssh: AsyncMock) -> None:
        """Port and username from the call are used for the connection."""
        await execute_command("db1", "true", port=2222, username="admin")

        assert ssh.call_args.args == ("db1",)
        assert ssh.call_args.kwargs["port"] == 2222
        assert ssh.call_args.kwargs["username"] == "admin"

    @pytest.mark.asyncio
    async def test_command_timeout_from_config(
        self,
        ssh: AsyncMock,
        mock_connection: MagicMock,
        private_key: str,
    ) -> None:
        """A configured command timeout is applied to execution."""
        set_config(
            Config.from_settings(
                Settings(private_key=private_key, username="deploy", command_timeout=9)
            )
        )

        await execute_command("web1", "sleep 1")

        assert mock_connection.run.call_args.kwargs["timeout"] == 9

    @pytest.mark.asyncio
    async def test_missing_private_key_never_connects(self, ssh: AsyncMock) -> None:
        """Configuration problems are reported before any network I/O."""
        set_config(Config.from_settings(Settings(username="deploy")))

        with pytest.raises(ToolError, match="private key"):
            await execute_command("web1", "uptime")

        ssh.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_failure_is_tool_error(self, ssh: AsyncMock) -> None:
        """Transport failures surface as tool errors with the typed cause."""
        ssh.side_effect = asyncssh.PermissionDenied("Permission denied")

        with pytest.raises(ToolError, match="authentication_failed") as exc_info:
            await execute_command("web1", "uptime")

        assert isinstance(exc_info.value.__cause__, ConnectionFault)

    @pytest.mark.asyncio
    async def test_execution_failure_is_tool_error(
        self,
        ssh: AsyncMock,
        mock_connection: MagicMock,
    ) -> None:
        mock_connection.run.side_effect = asyncssh.ConnectionLost("reset")

        with pytest.raises(ToolError) as exc_info:
            await execute_command("web1", "uptime")

        assert isinstance(exc_info.value.__cause__, ExecutionFault)
        mock_connection.close.assert_called_once()


class TestExecuteScript:
    """execute_script tool."""

    @pytest.mark.asyncio
    async def test_runs_script(
        self,
        ssh: AsyncMock,
        mock_connection: MagicMock,
        completed: Callable[..., MagicMock],
    ) -> None:
        mock_connection.run.side_effect = [
            completed(),
            completed(),
            completed(stdout="42\n"),
            completed(),
        ]

        result = await execute_script("web1", "echo 42", interpreter="bash")

        assert result["stdout"] == "42\n"
        commands = [call.args[0] for call in mock_connection.run.call_args_list]
        assert commands[2].startswith("bash /tmp/hostops_script_")
        assert commands[3].startswith("rm -f /tmp/hostops_script_")


class TestFileTools:
    """upload_file and download_file tools."""

    @pytest.mark.asyncio
    async def test_upload_rejects_bad_permissions_before_connecting(self, ssh: AsyncMock) -> None:
        with pytest.raises(ToolError, match="octal"):
            await upload_file("web1", "x", "/tmp/x", permissions="rwx")

        ssh.assert_not_called()

    @pytest.mark.asyncio
    async def test_download_rejects_empty_path(self, ssh: AsyncMock) -> None:
        with pytest.raises(ToolError, match="empty"):
            await download_file("web1", "")

        ssh.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload(
        self,
        ssh: AsyncMock,
        mock_sftp: MagicMock,
    ) -> None:
        result = await upload_file("web1", "hello", "/tmp/greeting.txt")

        assert result == {"path": "/tmp/greeting.txt", "size": 5}
        mock_sftp.put.assert_awaited_once()
        assert mock_sftp.put.call_args.args[1] == "/tmp/greeting.txt"

    @pytest.mark.asyncio
    async def test_download_failure_is_tool_error(
        self,
        ssh: AsyncMock,
        mock_sftp: MagicMock,
    ) -> None:
        mock_sftp.get.side_effect = asyncssh.SFTPNoSuchFile("No such file")

        with pytest.raises(ToolError, match="/missing"):
            await download_file("web1", "/missing")


class TestHostMetadata:
    """host_metadata tool."""

    @pytest.mark.asyncio
    async def test_degraded_host_still_answers(
        self,
        ssh: AsyncMock,
        mock_connection: MagicMock,
        completed: Callable[..., MagicMock],
    ) -> None:
        """Every query failing still produces a full response."""
        mock_connection.run.return_value = completed(returncode=127)

        result = await host_metadata("web1")

        assert result["hostname"] == ""
        assert result["loadAverage"] == {"1min": 0.0, "5min": 0.0, "15min": 0.0}
        assert result["memoryTotal"] == 0
