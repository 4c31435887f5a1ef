"""Configuration module for HostOps MCP.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- HostKeyPolicy: Decides SSH host key verification per host
- Settings: Environment variable configuration
"""

from hostops_mcp.config.host_keys import HostKeyDecision, HostKeyPolicy
from hostops_mcp.config.main import Config
from hostops_mcp.config.settings import Settings

__all__ = ["Config", "HostKeyDecision", "HostKeyPolicy", "Settings"]
