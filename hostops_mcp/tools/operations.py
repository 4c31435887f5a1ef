"""MCP tools for single SSH operations against remote hosts."""

import logging
from typing import Any, Literal

from fastmcp.exceptions import ToolError

from hostops_mcp.services import (
    Session,
    collect_host_metadata,
    download_file as download_remote_file,
    get_config,
    run_command,
    run_script,
    upload_file as upload_remote_file,
)
from hostops_mcp.tools.handlers import run_operation
from hostops_mcp.utils.validation import validate_permissions, validate_remote_path

logger = logging.getLogger(__name__)

Encoding = Literal["base64", "text"]


async def execute_command(
    host: str,
    command: str,
    port: int = 22,
    username: str | None = None,
    working_directory: str | None = None,
) -> dict[str, Any]:
    """Execute a single command on a remote host via SSH.

    Args:
        host: Hostname or IP address to connect to.
        command: The command to execute.
        port: SSH port for this connection (default: 22).
        username: Override the default SSH username for this connection.
        working_directory: Working directory for the command.

    Returns:
        Dict with stdout, stderr, exitCode and durationMs. A non-zero
        exitCode is a normal result.
    """
    timeout = get_config().command_timeout

    async def action(session: Session) -> dict[str, Any]:
        result = await run_command(session, command, working_directory, timeout=timeout)
        return result.to_dict()

    return await run_operation("execute_command", host, port, username, action)


async def execute_script(
    host: str,
    script: str,
    port: int = 22,
    username: str | None = None,
    interpreter: str = "sh",
    working_directory: str | None = None,
) -> dict[str, Any]:
    """Upload a script to a temporary location and execute it on a remote host.

    Args:
        host: Hostname or IP address to connect to.
        script: The script content to execute.
        port: SSH port for this connection (default: 22).
        username: Override the default SSH username for this connection.
        interpreter: Script interpreter (default: 'sh').
        working_directory: Working directory for script execution.

    Returns:
        Dict with stdout, stderr, exitCode and durationMs.
    """
    timeout = get_config().command_timeout

    async def action(session: Session) -> dict[str, Any]:
        result = await run_script(
            session,
            script,
            interpreter=interpreter,
            working_directory=working_directory,
            timeout=timeout,
        )
        return result.to_dict()

    return await run_operation("execute_script", host, port, username, action)


async def upload_file(
    host: str,
    content: str,
    destination_path: str,
    port: int = 22,
    username: str | None = None,
    encoding: Encoding = "text",
    permissions: str | None = None,
) -> dict[str, Any]:
    """Upload a file to a remote host via SFTP.

    Args:
        host: Hostname or IP address to connect to.
        content: File content (base64 encoded for binary, plain text for text files).
        destination_path: Full path where to save the file.
        port: SSH port for this connection (default: 22).
        username: Override the default SSH username for this connection.
        encoding: Content encoding: 'base64' or 'text' (default: 'text').
        permissions: File permissions in octal format (e.g., '0644').

    Returns:
        Dict with the destination path and size in bytes.
    """
    try:
        validate_remote_path(destination_path)
        if permissions:
            permissions = validate_permissions(permissions)
    except ValueError as e:
        raise ToolError(str(e)) from e

    async def action(session: Session) -> dict[str, Any]:
        result = await upload_remote_file(
            session,
            content,
            destination_path,
            encoding=encoding,
            permissions=permissions,
        )
        return result.to_dict()

    return await run_operation("upload_file", host, port, username, action)


async def download_file(
    host: str,
    source_path: str,
    port: int = 22,
    username: str | None = None,
    encoding: Encoding = "base64",
) -> dict[str, Any]:
    """Download a file from a remote host via SFTP.

    Args:
        host: Hostname or IP address to connect to.
        source_path: Full path of the file to download.
        port: SSH port for this connection (default: 22).
        username: Override the default SSH username for this connection.
        encoding: Content encoding: 'base64' or 'text' (default: 'base64').

    Returns:
        Dict with content, path, size, permissions (octal) and
        modifiedTime (ISO 8601).
    """
    try:
        validate_remote_path(source_path)
    except ValueError as e:
        raise ToolError(str(e)) from e

    async def action(session: Session) -> dict[str, Any]:
        result = await download_remote_file(session, source_path, encoding=encoding)
        return result.to_dict()

    return await run_operation("download_file", host, port, username, action)


async def host_metadata(
    host: str,
    port: int = 22,
    username: str | None = None,
) -> dict[str, Any]:
    """Retrieve host metadata from a remote system.

    Args:
        host: Hostname or IP address to connect to.
        port: SSH port for this connection (default: 22).
        username: Override the default SSH username for this connection.

    Returns:
        Dict with hostname, osType, osRelease, architecture, uptimeSeconds,
        loadAverage (1min/5min/15min), memoryTotal and memoryFree. Fields
        whose query failed are zero or empty.
    """
    timeout = get_config().command_timeout

    async def action(session: Session) -> dict[str, Any]:
        metadata = await collect_host_metadata(session, timeout=timeout)
        return metadata.to_dict()

    return await run_operation("host_metadata", host, port, username, action)
