"""MCP tools for HostOps MCP."""

from hostops_mcp.tools.operations import (
    download_file,
    execute_command,
    execute_script,
    host_metadata,
    upload_file,
)

__all__ = [
    "download_file",
    "execute_command",
    "execute_script",
    "host_metadata",
    "upload_file",
]
