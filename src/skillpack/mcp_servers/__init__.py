"""
skillpack MCP servers

- skills: catalog and installer tools over stdio
"""

from .skills import create_mcp_server, run_mcp_server

__all__ = ["create_mcp_server", "run_mcp_server"]
