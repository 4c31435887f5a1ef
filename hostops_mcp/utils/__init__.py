"""Utilities for HostOps MCP."""

from hostops_mcp.utils.console import ColorfulFormatter
from hostops_mcp.utils.shell import (
    decode_output,
    heredoc_delimiter,
    heredoc_write,
    in_directory,
    quote_path,
)
from hostops_mcp.utils.validation import validate_permissions, validate_remote_path

__all__ = [
    "ColorfulFormatter",
    "decode_output",
    "heredoc_delimiter",
    "heredoc_write",
    "in_directory",
    "quote_path",
    "validate_permissions",
    "validate_remote_path",
]
