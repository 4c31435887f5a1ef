"""Services for HostOps MCP."""

from hostops_mcp.services.executors import run_command, run_script
from hostops_mcp.services.failures import (
    ConfigurationFault,
    ConnectionFault,
    ExecutionFault,
    OperationFailure,
    TransferFault,
)
from hostops_mcp.services.metadata import collect_host_metadata
from hostops_mcp.services.session import (
    Session,
    open_session,
    resolve_connection_parameters,
)
from hostops_mcp.services.state import get_config, reset_state, set_config
from hostops_mcp.services.transfer import download_file, upload_file

__all__ = [
    "ConfigurationFault",
    "ConnectionFault",
    "ExecutionFault",
    "OperationFailure",
    "Session",
    "TransferFault",
    "collect_host_metadata",
    "download_file",
    "get_config",
    "open_session",
    "reset_state",
    "resolve_connection_parameters",
    "run_command",
    "run_script",
    "set_config",
    "upload_file",
]
