"""Data models for HostOps MCP."""

from hostops_mcp.models.command import CommandResult
from hostops_mcp.models.metadata import HostMetadata, LoadAverage, MemoryInfo
from hostops_mcp.models.ssh import ConnectionParameters
from hostops_mcp.models.transfer import ContentEncoding, DownloadResult, UploadResult

__all__ = [
    "CommandResult",
    "ConnectionParameters",
    "ContentEncoding",
    "DownloadResult",
    "HostMetadata",
    "LoadAverage",
    "MemoryInfo",
    "UploadResult",
]
