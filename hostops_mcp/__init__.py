"""HostOps MCP: stateless single-operation SSH tools for orchestrators."""
